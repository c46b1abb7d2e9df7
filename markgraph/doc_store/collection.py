from datetime import datetime, timezone
from typing import Any, Generic, Mapping, TypeVar

from markgraph.doc_store.base import Database, Document, Filter, Sort
from markgraph.doc_store.schemas import DeleteResult, UpdateResult
from markgraph.domain.base import INTERNAL_FIELDS, BaseDoc

Schema = TypeVar("Schema", bound=BaseDoc)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DocCollection(Generic[Schema]):
    """Typed collection whose writes maintain created and updated timestamps.

    Callers pass plain mappings of fields. ``id``, ``date_created`` and
    ``date_updated`` are owned by the collection and stripped from anything a
    caller supplies. Reads are validated into ``model`` instances.
    """

    def __init__(self, db: Database, name: str, model: type[Schema]) -> None:
        self.name = name
        self.model = model
        self.collection = db.bind(name)

    @staticmethod
    def _without_internal(item: Mapping[str, Any]) -> Document:
        """Remove internal fields from an item so that callers cannot alter them."""
        return {key: value for key, value in item.items() if key not in INTERNAL_FIELDS}

    def _stamped(self, item: Mapping[str, Any]) -> Document:
        safe = self._without_internal(item)
        now = _now()
        safe["date_created"] = now
        safe["date_updated"] = now
        return safe

    def _to_model(self, document: Document | None) -> Schema | None:
        return self.model.model_validate(document) if document is not None else None

    def create_one(self, item: Mapping[str, Any]) -> str:
        """Add ``item`` to the collection.

        Returns:
            The ID of the inserted document
        """
        return self.collection.insert_one(self._stamped(item))

    def create_many(self, items: list[Mapping[str, Any]]) -> dict[int, str]:
        """Add ``items`` to the collection. Either all of them are inserted or none.

        Returns:
            Mapping of input position to the ID of the inserted document
        """
        ids = self.collection.insert_many([self._stamped(item) for item in items])
        return dict(enumerate(ids))

    def read_one(self, filter: Filter) -> Schema | None:
        """Read the document that matches ``filter``, or None if nothing matches."""
        return self._to_model(self.collection.find_one(filter))

    def read_many(self, filter: Filter, sort: Sort | None = None) -> list[Schema]:
        """Read all documents that match ``filter``."""
        return [self.model.model_validate(doc) for doc in self.collection.find(filter, sort)]

    def replace_one(self, filter: Filter, item: Mapping[str, Any]) -> UpdateResult:
        """Replace the document that matches ``filter`` with ``item``.

        The creation time of the replaced document is preserved.
        """
        current = self.collection.find_one(filter)
        if current is None:
            return UpdateResult()
        safe = self._without_internal(item)
        safe["date_created"] = current["date_created"]
        safe["date_updated"] = _now()
        return self.collection.replace_one({"id": current["id"]}, safe)

    def partial_update_one(self, filter: Filter, update: Mapping[str, Any]) -> UpdateResult:
        """Update only the fields present in ``update`` on the document that matches ``filter``."""
        safe = self._without_internal(update)
        safe["date_updated"] = _now()
        return self.collection.update_one(filter, {"$set": safe})

    def update_one(self, filter: Filter, update: Mapping[str, Any]) -> UpdateResult:
        """Apply update operators (``$addToSet``, ``$pull``...) and refresh the update time."""
        operators = {op: dict(fields) for op, fields in update.items()}
        operators.setdefault("$set", {})["date_updated"] = _now()
        return self.collection.update_one(filter, operators)

    def update_many(self, filter: Filter, update: Mapping[str, Any]) -> UpdateResult:
        """Like ``update_one`` but for every matching document."""
        operators = {op: dict(fields) for op, fields in update.items()}
        operators.setdefault("$set", {})["date_updated"] = _now()
        return self.collection.update_many(filter, operators)

    def delete_one(self, filter: Filter) -> DeleteResult:
        return self.collection.delete_one(filter)

    def delete_many(self, filter: Filter) -> DeleteResult:
        return self.collection.delete_many(filter)

    def count(self, filter: Filter) -> int:
        return self.collection.count_documents(filter)

    def pop_one(self, filter: Filter) -> Schema | None:
        """Remove and return one document that matches ``filter``, or None."""
        return self._to_model(self.collection.find_one_and_delete(filter))
