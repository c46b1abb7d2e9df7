from collections import Counter
from typing import Iterable

from loguru import logger

from markgraph.doc_store import Database, DocCollection
from markgraph.domain.tag import TagCount, TagDoc
from markgraph.errors import BadValuesError, DoesNotExistError


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """Strip whitespace and drop duplicates, keeping first-seen order.

    Raises:
        BadValuesError: If no tags are given or one of them is blank
    """
    normalized: list[str] = []
    for tag in tags:
        tag = tag.strip() if isinstance(tag, str) else ""
        if not tag:
            raise BadValuesError("Tags must be non-empty strings!")
        if tag not in normalized:
            normalized.append(tag)
    if not normalized:
        raise BadValuesError("At least one tag is required!")
    return normalized


class TaggingConcept:
    """Sets of tags attached to items.

    A tag record is created lazily the first time an item's tags are mutated
    or queried, and there is at most one record per item.

    Args:
        strict_delete: When True, deleting a tag the item does not carry raises
            ``DoesNotExistError``. Otherwise deletion is idempotent.
    """

    def __init__(
        self, db: Database, collection_name: str = "tags", strict_delete: bool = False
    ) -> None:
        self.tags = DocCollection(db, collection_name, TagDoc)
        self.strict_delete = strict_delete

    def _ensure_created(self, item: str) -> TagDoc:
        record = self.tags.read_one({"item": item})
        if record is None:
            self.tags.create_one({"item": item, "tags": []})
            record = self.tags.read_one({"item": item})
        return record

    def add_tags(self, item: str, tags: Iterable[str]) -> dict:
        tags = normalize_tags(tags)
        self._ensure_created(item)
        self.tags.update_one({"item": item}, {"$addToSet": {"tags": {"$each": tags}}})
        logger.debug(f"Added tags {tags} to {item}")
        return {"msg": "Tags successfully updated!"}

    def delete_tags(self, item: str, tags: Iterable[str]) -> dict:
        tags = normalize_tags(tags)
        record = self._ensure_created(item)
        if self.strict_delete:
            for tag in tags:
                if tag not in record.tags:
                    raise DoesNotExistError("Tag {0} does not exist on item {1}!", tag, item)
        self.tags.update_one({"item": item}, {"$pull": {"tags": {"$in": tags}}})
        logger.debug(f"Deleted tags {tags} from {item}")
        return {"msg": "Tags deleted successfully!"}

    def get_tags_for_id(self, item: str) -> list[str]:
        return self._ensure_created(item).tags

    def delete(self, item: str) -> dict:
        """Delete the tag record of ``item``."""
        self.tags.delete_many({"item": item})
        return {"msg": "Tags deleted successfully!"}

    def get_items_with_tag(self, tag: str, items: Iterable[str] | None = None) -> list[str]:
        """Return the items carrying ``tag``, optionally restricted to ``items``."""
        filter: dict = {"tags": tag}
        if items is not None:
            filter["item"] = {"$in": list(items)}
        return [record.item for record in self.tags.read_many(filter)]

    def get_matching_items(self, item: str, others: Iterable[str]) -> list[str]:
        """Return the subset of ``others`` sharing at least one tag with ``item``.

        ``item`` itself is never part of the result. Order follows ``others``.
        """
        others = [other for other in others if other != item]
        record = self.tags.read_one({"item": item})
        if record is None or not record.tags or not others:
            return []

        records = self.tags.read_many({"item": {"$in": others}, "tags": {"$in": record.tags}})
        matching = {r.item for r in records}
        return [other for other in others if other in matching]

    def top_tags_for_items(self, items: Iterable[str], limit: int) -> list[TagCount]:
        """Count tag frequency across ``items`` and return the ``limit`` most frequent.

        Ties keep the order in which tags were first seen, walking ``items`` in order.
        """
        items = list(dict.fromkeys(items))
        if limit <= 0 or not items:
            return []

        by_item = {r.item: r.tags for r in self.tags.read_many({"item": {"$in": items}})}
        counter: Counter[str] = Counter()
        for item in items:
            counter.update(by_item.get(item, []))
        return [TagCount(tag=tag, count=count) for tag, count in counter.most_common(limit)]
