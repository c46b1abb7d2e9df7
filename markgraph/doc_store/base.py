from typing import Any, Mapping, Protocol, Sequence

from markgraph.doc_store.schemas import DeleteResult, UpdateResult

Filter = Mapping[str, Any]
Document = dict[str, Any]
Sort = Sequence[tuple[str, int]]


class Collection(Protocol):
    """Raw document collection. Each call is atomic on its own."""

    def insert_one(self, document: Document) -> str:
        """Insert a document and return its generated ID."""
        ...

    def insert_many(self, documents: list[Document]) -> list[str]:
        """Insert all documents or none, returning IDs in input order."""
        ...

    def find_one(self, filter: Filter) -> Document | None:
        """Return the first document matching ``filter``."""
        ...

    def find(self, filter: Filter, sort: Sort | None = None) -> list[Document]:
        """Return all documents matching ``filter``."""
        ...

    def replace_one(self, filter: Filter, document: Document) -> UpdateResult:
        """Replace the first matching document, keeping its ID."""
        ...

    def update_one(self, filter: Filter, update: Mapping[str, Any]) -> UpdateResult:
        """Apply update operators to the first matching document."""
        ...

    def update_many(self, filter: Filter, update: Mapping[str, Any]) -> UpdateResult:
        """Apply update operators to every matching document."""
        ...

    def delete_one(self, filter: Filter) -> DeleteResult:
        """Delete the first matching document."""
        ...

    def delete_many(self, filter: Filter) -> DeleteResult:
        """Delete every matching document."""
        ...

    def count_documents(self, filter: Filter) -> int:
        """Count matching documents."""
        ...

    def find_one_and_delete(self, filter: Filter) -> Document | None:
        """Remove and return the first matching document."""
        ...


class Database(Protocol):
    def bind(self, name: str) -> Collection:
        """Claim the collection called ``name``.

        Raises:
            CollectionExistsError: If the name was already claimed on this database
        """
        ...

    def drop(self) -> None:
        """Delete every document in every collection."""
        ...

    def save(self, filepath: str | None = None) -> None:
        """Persist the database."""
        ...
