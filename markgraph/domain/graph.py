"""Similarity graph domain models."""

from markgraph.domain.base import BaseDoc


class GraphDoc(BaseDoc):
    """Graph node paired 1:1 with a webapp.

    Neighbors are the items this node shares at least one tag with. Edges are
    symmetric: if A lists B, B lists A.
    """

    item: str
    owner: str
    neighbors: list[str] = []
