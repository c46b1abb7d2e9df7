from pathlib import Path

from markgraph.api import create_routes
from markgraph.doc_store import LocalDatabase
from scripts.rebuild_graph import main


def seed_database(filepath: Path) -> dict[str, str]:
    """Write a database with two tagged webapps for alice but no graph nodes."""
    db = LocalDatabase(filepath)
    routes = create_routes(db)
    alice = routes.authing.create("alice", "alice123")["user"].id
    routes.authing.create("bob", "bob123")

    ids = {}
    for name in ["news", "blog"]:
        ids[name] = routes.webapping.create(alice, name, "", f"https://{name}.example")["id"]
        routes.tagging.add_tags(ids[name], ["reading"])
    db.save()
    return ids


def test_rebuild_graph_from_file(tmp_path: Path) -> None:
    filepath = tmp_path / "markgraph.json"
    ids = seed_database(filepath)

    main(database_path=str(filepath))

    routes = create_routes(LocalDatabase(filepath))
    assert routes.graphing.get_neighbors(ids["news"]) == [ids["blog"]]
    assert routes.graphing.get_neighbors(ids["blog"]) == [ids["news"]]


def test_rebuild_graph_for_selected_users(tmp_path: Path) -> None:
    filepath = tmp_path / "markgraph.json"
    ids = seed_database(filepath)

    main(database_path=str(filepath), usernames=["bob"])

    routes = create_routes(LocalDatabase(filepath))
    assert routes.graphing.get_user_nodes(routes.authing.get_user_by_username("bob").id) == []
    assert routes.graphing.nodes.read_one({"item": ids["news"]}) is None
