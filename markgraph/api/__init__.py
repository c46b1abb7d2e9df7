from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from markgraph.api.routes import Routes, build_router
from markgraph.concepts import (
    AuthenticatingConcept,
    FriendingConcept,
    GraphingConcept,
    PostingConcept,
    SessioningConcept,
    TaggingConcept,
    WebappingConcept,
)
from markgraph.config import settings
from markgraph.doc_store import Database


def create_routes(db: Database, *, strict_tag_delete: bool = False) -> Routes:
    """Instantiate every concept on ``db`` and wire them into the routes."""
    return Routes(
        authing=AuthenticatingConcept(db, "users"),
        sessioning=SessioningConcept(),
        webapping=WebappingConcept(db, "webapps"),
        tagging=TaggingConcept(db, "tags", strict_delete=strict_tag_delete),
        graphing=GraphingConcept(db, "graph"),
        posting=PostingConcept(db, "posts"),
        friending=FriendingConcept(db, "friends", "friend_requests"),
        top_tags_limit=settings.top_tags_limit,
    )


def create_app(
    *,
    db: Database,
    strict_tag_delete: bool | None = None,
    save_on_shutdown: bool = False,
) -> FastAPI:
    """Create FastAPI app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if save_on_shutdown:
            db.save()

    if strict_tag_delete is None:
        strict_tag_delete = settings.strict_tag_delete
    routes = create_routes(db, strict_tag_delete=strict_tag_delete)

    app = FastAPI(lifespan=lifespan)

    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router=build_router(routes).to_api_router(prefix=settings.api_prefix))

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            logger.info(f"No route for {request.method} {request.url.path}")
            return JSONResponse(status_code=404, content={"msg": "Page not found"})
        return JSONResponse(status_code=exc.status_code, content={"msg": str(exc.detail)})

    return app
