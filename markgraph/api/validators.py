"""Input validators attached to routes.

Each model lists only the fields it checks; other bound arguments pass through
untouched. Fields missing from the request arrive as None.
"""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field

from markgraph.domain.post import PostOptions

URL_PATTERN = r"^https?://\S+$"


def split_tags(value: Any) -> Any:
    """Accept ``"a, b"`` as well as ``["a", "b"]``."""
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    return value


TagList = Annotated[list[Annotated[str, Field(min_length=1)]], BeforeValidator(split_tags)]


class UsernameParams(BaseModel):
    username: str = Field(min_length=1)


class Credentials(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class PasswordPatch(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1)


class PostsQuery(BaseModel):
    author: str | None = Field(default=None, min_length=1)


class PostCreate(BaseModel):
    content: str = Field(min_length=1)
    options: PostOptions | None = None


class PostPatch(BaseModel):
    post_id: str = Field(min_length=1)
    content: str | None = Field(default=None, min_length=1)
    options: PostOptions | None = None


class WebappCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str | None = None
    url: str = Field(pattern=URL_PATTERN)


class WebappRef(BaseModel):
    webapp_id: str = Field(min_length=1)


class WebappPatch(WebappRef):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    url: str | None = Field(default=None, pattern=URL_PATTERN)


class TagsBody(WebappRef):
    tags: TagList = Field(min_length=1)


class TopTagsQuery(BaseModel):
    limit: int | None = Field(default=None, ge=1, le=100)
