from markgraph.doc_store.base import Collection, Database
from markgraph.doc_store.collection import DocCollection
from markgraph.doc_store.local import CollectionExistsError, LocalDatabase

__all__ = ["Collection", "Database", "DocCollection", "LocalDatabase", "CollectionExistsError"]
