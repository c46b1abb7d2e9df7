from typing import Iterable

from loguru import logger

from markgraph.doc_store import Database, DocCollection
from markgraph.domain.graph import GraphDoc
from markgraph.errors import NotFoundError


class GraphingConcept:
    """Undirected graph over items, one node per item.

    Edge operations always update both endpoints, so a neighbor list on one
    node is mirrored on the other.
    """

    def __init__(self, db: Database, collection_name: str = "graph") -> None:
        self.nodes = DocCollection(db, collection_name, GraphDoc)

    def add_node(self, item: str, owner: str) -> dict:
        if self.nodes.read_one({"item": item}) is None:
            self.nodes.create_one({"item": item, "owner": owner, "neighbors": []})
        return {"msg": "Node successfully created!"}

    def delete_node(self, item: str) -> dict:
        self.nodes.delete_one({"item": item})
        self.nodes.update_many({"neighbors": item}, {"$pull": {"neighbors": item}})
        return {"msg": "Node successfully deleted!"}

    def add_edge(self, source: str, target: str) -> dict:
        """Connect two existing nodes.

        Raises:
            NotFoundError: If either endpoint has no node
        """
        self.get_node(source)
        self.get_node(target)
        if source != target:
            self.nodes.update_one({"item": source}, {"$addToSet": {"neighbors": target}})
            self.nodes.update_one({"item": target}, {"$addToSet": {"neighbors": source}})
        return {"msg": "Edge successfully created!"}

    def delete_edge(self, source: str, target: str) -> dict:
        self.nodes.update_one({"item": source}, {"$pull": {"neighbors": target}})
        self.nodes.update_one({"item": target}, {"$pull": {"neighbors": source}})
        return {"msg": "Edge successfully deleted!"}

    def update_edges_for_user_node(self, user: str, item: str, connected: Iterable[str]) -> dict:
        """Recompute the edges between ``item`` and every other node owned by ``user``.

        A sibling node gets an edge to ``item`` if its item is in ``connected``,
        and loses any existing edge otherwise. Every call rescans all of the
        user's nodes.

        Raises:
            NotFoundError: If ``item`` has no node
        """
        self.get_node(item)
        connected = set(connected)
        for node in self.nodes.read_many({"owner": user}):
            if node.item == item:
                continue
            if node.item in connected:
                self.add_edge(item, node.item)
            else:
                self.delete_edge(item, node.item)
        logger.debug(f"Updated edges for {item}: {len(connected)} connected")
        return {"msg": "Edges updated for user node!"}

    def get_user_nodes(self, user: str) -> list[GraphDoc]:
        return self.nodes.read_many({"owner": user})

    def get_node(self, item: str) -> GraphDoc:
        node = self.nodes.read_one({"item": item})
        if node is None:
            raise NotFoundError("Graph node for {0} does not exist!", item)
        return node

    def get_neighbors(self, item: str) -> list[str]:
        return self.get_node(item).neighbors
