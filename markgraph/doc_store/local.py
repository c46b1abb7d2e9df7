import copy
import json
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping
from uuid import uuid4

from loguru import logger

from markgraph.doc_store.base import Collection, Database, Document, Filter, Sort
from markgraph.doc_store.filters import apply_update, matches
from markgraph.doc_store.schemas import DeleteResult, UpdateResult

_DATE_FIELDS = ("date_created", "date_updated")


class CollectionExistsError(ValueError):
    """Raised when a collection name is bound twice on the same database."""


def _sort_key(field: str):
    def key(document: Document) -> tuple[bool, Any]:
        value = document.get(field)
        return (value is None, value)

    return key


def _sorted(documents: list[Document], sort: Sort) -> list[Document]:
    # Ties keep insertion order, newest first when the primary key is descending.
    if sort and sort[0][1] < 0:
        documents = documents[::-1]
    for field, direction in reversed(sort):
        documents = sorted(documents, key=_sort_key(field), reverse=direction < 0)
    return documents


class LocalCollection(Collection):
    """In-memory collection. A lock makes every primitive atomic."""

    def __init__(self, name: str, documents: list[Document] | None = None) -> None:
        self.name = name
        self._documents: dict[str, Document] = {doc["id"]: doc for doc in documents or []}
        self._lock = threading.RLock()

    def _first(self, filter: Filter) -> Document | None:
        for document in self._documents.values():
            if matches(document, filter):
                return document
        return None

    def insert_one(self, document: Document) -> str:
        return self.insert_many([document])[0]

    def insert_many(self, documents: list[Document]) -> list[str]:
        prepared = []
        for document in documents:
            doc = copy.deepcopy(dict(document))
            doc["id"] = doc.get("id") or uuid4().hex
            prepared.append(doc)
        with self._lock:
            ids = [doc["id"] for doc in prepared]
            if len(set(ids)) != len(ids) or any(i in self._documents for i in ids):
                raise ValueError(f"Duplicate document ID in collection '{self.name}'")
            for doc in prepared:
                self._documents[doc["id"]] = doc
        return ids

    def find_one(self, filter: Filter) -> Document | None:
        with self._lock:
            document = self._first(filter)
            return copy.deepcopy(document) if document is not None else None

    def find(self, filter: Filter, sort: Sort | None = None) -> list[Document]:
        with self._lock:
            found = [copy.deepcopy(d) for d in self._documents.values() if matches(d, filter)]
        return _sorted(found, sort) if sort else found

    def replace_one(self, filter: Filter, document: Document) -> UpdateResult:
        with self._lock:
            current = self._first(filter)
            if current is None:
                return UpdateResult()
            replacement = copy.deepcopy(dict(document))
            replacement["id"] = current["id"]
            modified = replacement != current
            self._documents[current["id"]] = replacement
            return UpdateResult(matched_count=1, modified_count=int(modified))

    def update_one(self, filter: Filter, update: Mapping[str, Any]) -> UpdateResult:
        with self._lock:
            current = self._first(filter)
            if current is None:
                return UpdateResult()
            modified = apply_update(current, copy.deepcopy(dict(update)))
            return UpdateResult(matched_count=1, modified_count=int(modified))

    def update_many(self, filter: Filter, update: Mapping[str, Any]) -> UpdateResult:
        result = UpdateResult()
        with self._lock:
            for document in self._documents.values():
                if matches(document, filter):
                    result.matched_count += 1
                    if apply_update(document, copy.deepcopy(dict(update))):
                        result.modified_count += 1
        return result

    def delete_one(self, filter: Filter) -> DeleteResult:
        with self._lock:
            current = self._first(filter)
            if current is None:
                return DeleteResult()
            del self._documents[current["id"]]
            return DeleteResult(deleted_count=1)

    def delete_many(self, filter: Filter) -> DeleteResult:
        with self._lock:
            doomed = [i for i, d in self._documents.items() if matches(d, filter)]
            for document_id in doomed:
                del self._documents[document_id]
            return DeleteResult(deleted_count=len(doomed))

    def count_documents(self, filter: Filter) -> int:
        with self._lock:
            return sum(1 for d in self._documents.values() if matches(d, filter))

    def find_one_and_delete(self, filter: Filter) -> Document | None:
        with self._lock:
            current = self._first(filter)
            if current is None:
                return None
            return self._documents.pop(current["id"])

    def clear(self) -> None:
        with self._lock:
            self._documents.clear()

    def dump(self) -> list[Document]:
        with self._lock:
            return copy.deepcopy(list(self._documents.values()))


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode(document: Document) -> Document:
    for field in _DATE_FIELDS:
        if isinstance(document.get(field), str):
            document[field] = datetime.fromisoformat(document[field])
    return document


class LocalDatabase(Database):
    """Local document database that keeps collections in memory and stores them in a JSON file."""

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalDatabase.

        Args:
            filepath: Path to database file. If provided and exists, will auto-load.
                     If provided and doesn't exist, will save to this path when save() is called.
                     If not provided, creates empty database in memory only.
        """
        self._filepath = str(filepath) if filepath else None
        self._collections: dict[str, LocalCollection] = {}
        self._bound: set[str] = set()

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r") as f:
                data = json.load(f)
            self._collections = {
                name: LocalCollection(name, [_decode(doc) for doc in documents])
                for name, documents in data["collections"].items()
            }
            logger.info(f"Loaded {len(self._collections)} collections from {self._filepath}")

    def bind(self, name: str) -> LocalCollection:
        """Claim the collection called ``name`` and return it."""
        if name in self._bound:
            raise CollectionExistsError(f"Collection '{name}' already exists!")
        self._bound.add(name)
        if name not in self._collections:
            self._collections[name] = LocalCollection(name)
        return self._collections[name]

    def collection_names(self) -> set[str]:
        return set(self._collections.keys())

    def drop(self) -> None:
        """Delete every document but keep the bindings."""
        for collection in self._collections.values():
            collection.clear()

    def save(self, filepath: str | None = None) -> None:
        """Save the database to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        data = {
            "collections": {
                name: collection.dump() for name, collection in self._collections.items()
            }
        }
        with open(save_path, "w") as f:
            json.dump(data, f, default=_encode)
        logger.info(f"Saved {len(self._collections)} collections to {save_path}")
