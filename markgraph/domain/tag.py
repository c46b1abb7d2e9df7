"""Tag domain models."""

from pydantic import BaseModel

from markgraph.domain.base import BaseDoc


class TagDoc(BaseDoc):
    """The set of tags attached to one item. At most one per item."""

    item: str
    tags: list[str] = []


class TagCount(BaseModel):
    tag: str
    count: int
