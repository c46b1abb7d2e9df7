"""Webapp (bookmark) domain models."""

from markgraph.domain.base import BaseDoc


class WebappDoc(BaseDoc):
    """A bookmarked web application owned by one user."""

    user: str
    name: str
    description: str = ""
    url: str
