import pytest

from markgraph.concepts import (
    AuthenticatingConcept,
    GraphingConcept,
    TaggingConcept,
    WebappingConcept,
)
from markgraph.errors import NotFoundError
from markgraph.graph_maintenance import GraphMaintainer


def neighbors(graphing: GraphingConcept, item: str) -> set[str]:
    return set(graphing.get_neighbors(item))


def test_add_node_is_idempotent(graphing: GraphingConcept) -> None:
    graphing.add_node("w1", "alice")
    graphing.add_node("w1", "alice")

    assert len(graphing.get_user_nodes("alice")) == 1
    assert graphing.get_node("w1").neighbors == []


def test_edges_are_symmetric(graphing: GraphingConcept) -> None:
    for item in ["w1", "w2", "w3"]:
        graphing.add_node(item, "alice")

    graphing.add_edge("w1", "w2")
    graphing.add_edge("w1", "w3")
    graphing.add_edge("w1", "w2")

    assert neighbors(graphing, "w1") == {"w2", "w3"}
    assert neighbors(graphing, "w2") == {"w1"}
    assert neighbors(graphing, "w3") == {"w1"}

    graphing.delete_edge("w2", "w1")

    assert neighbors(graphing, "w1") == {"w3"}
    assert neighbors(graphing, "w2") == set()


def test_self_edges_are_ignored(graphing: GraphingConcept) -> None:
    graphing.add_node("w1", "alice")
    graphing.add_edge("w1", "w1")
    assert graphing.get_neighbors("w1") == []


def test_delete_node_removes_it_from_neighbors(graphing: GraphingConcept) -> None:
    for item in ["w1", "w2", "w3"]:
        graphing.add_node(item, "alice")
    graphing.add_edge("w1", "w2")
    graphing.add_edge("w1", "w3")

    graphing.delete_node("w1")

    with pytest.raises(NotFoundError):
        graphing.get_node("w1")
    assert graphing.get_neighbors("w2") == []
    assert graphing.get_neighbors("w3") == []


def test_update_edges_for_user_node(graphing: GraphingConcept) -> None:
    """Test that edges follow the connected set and stay within one owner."""
    for item in ["w1", "w2", "w3"]:
        graphing.add_node(item, "alice")
    graphing.add_node("b1", "bob")
    graphing.add_edge("w1", "w3")

    graphing.update_edges_for_user_node("alice", "w1", ["w2", "b1"])

    assert neighbors(graphing, "w1") == {"w2"}
    assert neighbors(graphing, "w2") == {"w1"}
    assert neighbors(graphing, "w3") == set(), "Stale edge should be removed"
    assert neighbors(graphing, "b1") == set(), "Other users' nodes are never connected"


def test_shared_tags_connect_webapps(
    webapping: WebappingConcept,
    tagging: TaggingConcept,
    graphing: GraphingConcept,
    maintainer: GraphMaintainer,
) -> None:
    """Test that tagging webapps keeps the graph in step with shared tags."""
    news = webapping.create("alice", "News", "", "https://news.example")["id"]
    blog = webapping.create("alice", "Blog", "", "https://blog.example")["id"]
    mail = webapping.create("alice", "Mail", "", "https://mail.example")["id"]
    for webapp_id in [news, blog, mail]:
        graphing.add_node(webapp_id, "alice")

    tagging.add_tags(news, ["reading"])
    maintainer.refresh_item("alice", news)
    tagging.add_tags(blog, ["reading", "writing"])
    maintainer.refresh_item("alice", blog)
    tagging.add_tags(mail, ["writing"])
    maintainer.refresh_item("alice", mail)

    assert neighbors(graphing, news) == {blog}
    assert neighbors(graphing, blog) == {news, mail}
    assert neighbors(graphing, mail) == {blog}

    tagging.delete_tags(blog, ["reading"])
    maintainer.refresh_item("alice", blog)

    assert neighbors(graphing, news) == set()
    assert neighbors(graphing, blog) == {mail}


def test_rebuild_user(
    webapping: WebappingConcept,
    tagging: TaggingConcept,
    graphing: GraphingConcept,
    maintainer: GraphMaintainer,
) -> None:
    first = webapping.create("alice", "One", "", "https://one.example")["id"]
    second = webapping.create("alice", "Two", "", "https://two.example")["id"]
    tagging.add_tags(first, ["shared"])
    tagging.add_tags(second, ["shared"])
    graphing.add_node("stale", "alice")

    result = maintainer.rebuild_user("alice")

    assert result == {"msg": "Graph rebuilt!", "created": 2, "removed": 1, "refreshed": 2}
    assert {node.item for node in graphing.get_user_nodes("alice")} == {first, second}
    assert neighbors(graphing, first) == {second}
    assert neighbors(graphing, second) == {first}


def test_shared_tag_adjacency_follows_tag_removal(
    authing: AuthenticatingConcept,
    webapping: WebappingConcept,
    tagging: TaggingConcept,
    graphing: GraphingConcept,
) -> None:
    alice = authing.create("alice", "alice123")["user"].id
    first = webapping.create(alice, "X", "", "http://x")["id"]
    second = webapping.create(alice, "Y", "", "http://y")["id"]
    graphing.add_node(first, alice)
    graphing.add_node(second, alice)
    tagging.add_tags(first, ["news", "tech"])
    tagging.add_tags(second, ["tech"])

    graphing.update_edges_for_user_node(
        alice, first, tagging.get_matching_items(first, [first, second])
    )

    assert neighbors(graphing, first) == {second}
    assert neighbors(graphing, second) == {first}

    tagging.delete_tags(first, ["tech"])
    graphing.update_edges_for_user_node(
        alice, first, tagging.get_matching_items(first, [first, second])
    )

    assert neighbors(graphing, first) == set()
    assert neighbors(graphing, second) == set()


def test_edges_need_both_nodes(graphing: GraphingConcept) -> None:
    """Test that an edge to a missing node is never written on one side only."""
    graphing.add_node("w1", "alice")

    with pytest.raises(NotFoundError):
        graphing.add_edge("w1", "ghost")
    with pytest.raises(NotFoundError):
        graphing.add_edge("ghost", "w1")
    with pytest.raises(NotFoundError):
        graphing.update_edges_for_user_node("alice", "ghost", ["w1"])

    assert graphing.get_neighbors("w1") == []
