"""Post domain models."""

from typing import Literal

from pydantic import BaseModel

from markgraph.domain.base import BaseDoc


class PostOptions(BaseModel):
    """Display options chosen by the author."""

    visibility: Literal["public", "friends", "private"] = "public"
    background_color: str | None = None


class PostDoc(BaseDoc):
    """A status update, or an activity entry logged on the author's behalf.

    Attributes:
        author: ID of the user who wrote (or triggered) the post
        content: Post text
        options: Display options
        kind: "status" for posts written by the user, "activity" for log entries
    """

    author: str
    content: str
    options: PostOptions = PostOptions()
    kind: Literal["status", "activity"] = "status"
