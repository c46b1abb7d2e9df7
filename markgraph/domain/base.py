"""Base document model shared by every persisted entity."""

from datetime import datetime

from pydantic import BaseModel

INTERNAL_FIELDS = ("id", "date_created", "date_updated")


class BaseDoc(BaseModel):
    """Fields owned by the document store.

    Attributes:
        id: Unique identifier generated on insert
        date_created: Set once when the document is inserted
        date_updated: Refreshed on every write through the store
    """

    id: str
    date_created: datetime
    date_updated: datetime
