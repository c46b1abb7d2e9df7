"""CLI for rebuilding the tag-similarity graph stored in a local database file"""

import argparse
import sys

from loguru import logger

from markgraph.api import create_routes
from markgraph.config import settings
from markgraph.doc_store import LocalDatabase


def main(database_path: str, usernames: list[str] | None = None) -> None:
    db = LocalDatabase(filepath=database_path)
    routes = create_routes(db, strict_tag_delete=settings.strict_tag_delete)

    if usernames:
        users = [routes.authing.get_user_by_username(username) for username in usernames]
    else:
        users = routes.authing.get_users()

    for user in users:
        result = routes.graph_maintainer.rebuild_user(user.id)
        logger.info(f"{user.username}: {result['created']} nodes created, {result['removed']} removed")

    db.save()


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--database",
        type=str,
        required=False,
        help="Local database file",
        default=settings.database_path,
    )
    parser.add_argument(
        "--username",
        type=str,
        action="append",
        required=False,
        help="Only rebuild the graph of this user (repeatable)",
    )

    args = parser.parse_args()

    logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])
    main(database_path=args.database, usernames=args.username)
