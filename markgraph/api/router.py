"""Request dispatcher.

Routes are declared in an explicit table of ``Route`` entries. For each request
the dispatcher binds the handler's parameters by name from the request, runs
the optional validator, calls the handler and turns the result, or the error
it raised, into a JSON response.
"""

import inspect
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Literal, Mapping

from fastapi import APIRouter, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ValidationError
from starlette.concurrency import run_in_threadpool

from markgraph.errors import FormattableError

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD"]
ErrorHandler = Callable[[Any], Exception | Awaitable[Exception]]

VALIDATION_FAILED = {"msg": "Bad Request: validation failed"}
INTERNAL_ERROR = {"msg": "Internal Server Error"}

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


@dataclass(frozen=True)
class Route:
    """One entry of the route table.

    Attributes:
        method: HTTP method
        path: Path template, with ``{name}`` segments bound as path parameters
        handler: Function to call. Its parameter names decide what gets bound
        validator: Optional pydantic model the bound arguments must satisfy
    """

    method: HttpMethod
    path: str
    handler: Callable[..., Any]
    validator: type[BaseModel] | None = None


async def read_body(request: Request) -> dict[str, Any]:
    """Read a JSON or form body as a dict. Empty and non-object bodies give ``{}``.

    Raises:
        ValueError: If the body is not valid JSON
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(_FORM_TYPES):
        form = await request.form()
        return dict(form)

    raw = await request.body()
    if not raw:
        return {}
    data = json.loads(raw)
    return data if isinstance(data, dict) else {}


def bind_arguments(
    handler: Callable[..., Any],
    *,
    session: Any,
    params: Mapping[str, Any],
    query: Mapping[str, Any],
    body: Mapping[str, Any],
) -> dict[str, Any]:
    """Bind the parameters of ``handler`` by name.

    ``session``, ``params``, ``query`` and ``body`` receive the raw objects.
    Any other name takes the first non-null value found in the path
    parameters, then the query string, then the body. A name found nowhere
    binds to the parameter's default, or None when it has none.
    """
    raw = {"session": session, "params": params, "query": query, "body": body}
    arguments: dict[str, Any] = {}

    for name, parameter in inspect.signature(handler).parameters.items():
        if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
            continue
        if name in raw:
            arguments[name] = raw[name]
            continue

        value = None
        for source in (params, query, body):
            if source.get(name) is not None:
                value = source[name]
                break
        if value is None and parameter.default is not parameter.empty:
            value = parameter.default
        arguments[name] = value

    return arguments


def validate_arguments(validator: type[BaseModel], arguments: dict[str, Any]) -> dict[str, Any]:
    """Validate bound arguments, replacing them with the validated (coerced) values.

    Raises:
        ValidationError: If the arguments do not satisfy ``validator``
    """
    validated = validator.model_validate(arguments)
    return {**arguments, **{name: getattr(validated, name) for name in validator.model_fields}}


def error_response(error: Exception) -> JSONResponse:
    """Map an error to a response. Only taxonomy errors reveal their message."""
    if isinstance(error, FormattableError) and error.kind is not None:
        return JSONResponse(status_code=error.kind.status_code, content={"msg": error.message})
    return JSONResponse(status_code=500, content=INTERNAL_ERROR)


class Router:
    """Explicit route table plus an ordered chain of error handlers."""

    def __init__(self, routes: Iterable[Route] = ()) -> None:
        self.routes: list[Route] = list(routes)
        self._error_handlers: list[tuple[type[Exception], ErrorHandler]] = []

    def add(
        self,
        method: HttpMethod,
        path: str,
        handler: Callable[..., Any],
        validator: type[BaseModel] | None = None,
    ) -> None:
        self.routes.append(Route(method, path, handler, validator))

    def register_error(self, error_type: type[Exception], handler: ErrorHandler) -> None:
        """Register a handler that may rewrite errors of ``error_type`` before responding.

        Handlers are tried in registration order and the first ``isinstance``
        match wins.
        """
        self._error_handlers.append((error_type, handler))

    async def handle_error(self, error: Exception) -> Exception:
        try:
            for error_type, handler in self._error_handlers:
                if isinstance(error, error_type):
                    if inspect.iscoroutinefunction(handler):
                        return await handler(error)
                    return await run_in_threadpool(handler, error)
            return error
        except Exception as e:
            logger.exception(f"Error handler failed while handling: {error}")
            return RuntimeError(
                f"While handling below error:\n{error}\n\nAnother error occurred:\n{e}"
            )

    async def dispatch(self, route: Route, request: Request) -> JSONResponse:
        try:
            body = await read_body(request)
        except ValueError:
            logger.info(f"{route.method} {route.path}: unreadable request body")
            return JSONResponse(status_code=400, content=VALIDATION_FAILED)

        arguments = bind_arguments(
            route.handler,
            session=request.session if "session" in request.scope else {},
            params=dict(request.path_params),
            query=dict(request.query_params),
            body=body,
        )

        if route.validator is not None:
            try:
                arguments = validate_arguments(route.validator, arguments)
            except ValidationError as e:
                logger.info(f"{route.method} {route.path}: validation failed ({e.error_count()})")
                return JSONResponse(status_code=400, content=VALIDATION_FAILED)

        try:
            if inspect.iscoroutinefunction(route.handler):
                result = await route.handler(**arguments)
            else:
                result = await run_in_threadpool(route.handler, **arguments)
        except Exception as e:
            error = await self.handle_error(e)
            response = error_response(error)
            if response.status_code == 500:
                logger.opt(exception=e).error(f"{route.method} {route.path} failed")
            else:
                logger.warning(f"{route.method} {route.path} -> {response.status_code}: {error}")
            return response

        return JSONResponse(content=jsonable_encoder(result))

    def _make_endpoint(self, route: Route) -> Callable[[Request], Awaitable[JSONResponse]]:
        async def endpoint(request: Request) -> JSONResponse:
            return await self.dispatch(route, request)

        endpoint.__name__ = route.handler.__name__
        return endpoint

    def to_api_router(self, prefix: str = "") -> APIRouter:
        """Build a FastAPI router with one endpoint per route."""
        router = APIRouter(prefix=prefix)
        for route in self.routes:
            router.add_api_route(
                route.path,
                self._make_endpoint(route),
                methods=[route.method],
                name=route.handler.__name__,
                response_model=None,
            )
        return router
