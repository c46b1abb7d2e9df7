"""Keeping the tag-similarity graph in step with webapps and their tags."""

from loguru import logger

from markgraph.concepts.graphing import GraphingConcept
from markgraph.concepts.tagging import TaggingConcept
from markgraph.concepts.webapping import WebappingConcept


class GraphMaintainer:
    """Recomputes similarity edges between a user's webapps from shared tags."""

    def __init__(
        self,
        *,
        webapping: WebappingConcept,
        tagging: TaggingConcept,
        graphing: GraphingConcept,
    ) -> None:
        self.webapping = webapping
        self.tagging = tagging
        self.graphing = graphing

    def refresh_item(self, user: str, item: str) -> dict:
        """Reconnect ``item`` to exactly those of the user's webapps it shares a tag with.

        Args:
            user: Owner of the webapp
            item: ID of the webapp whose tags changed

        Returns:
            Acknowledgement from the graphing concept
        """
        siblings = [webapp.id for webapp in self.webapping.get_by_user(user)]
        connected = self.tagging.get_matching_items(item, siblings)
        return self.graphing.update_edges_for_user_node(user, item, connected)

    def rebuild_user(self, user: str) -> dict:
        """Rebuild the whole graph of ``user``.

        Creates missing nodes, drops nodes whose webapp no longer exists and
        refreshes the edges of every webapp.

        Returns:
            Counts of nodes created, removed and refreshed
        """
        webapp_ids = [webapp.id for webapp in self.webapping.get_by_user(user)]
        existing = {node.item for node in self.graphing.get_user_nodes(user)}

        created = [item for item in webapp_ids if item not in existing]
        for item in created:
            self.graphing.add_node(item, user)

        removed = existing - set(webapp_ids)
        for item in removed:
            self.graphing.delete_node(item)

        for item in webapp_ids:
            self.refresh_item(user, item)

        logger.info(
            f"Rebuilt graph for {user}: {len(created)} created, {len(removed)} removed, "
            f"{len(webapp_ids)} refreshed"
        )
        return {
            "msg": "Graph rebuilt!",
            "created": len(created),
            "removed": len(removed),
            "refreshed": len(webapp_ids),
        }
