"""Result models returned by document store writes."""

from pydantic import BaseModel


class UpdateResult(BaseModel):
    matched_count: int = 0
    modified_count: int = 0


class DeleteResult(BaseModel):
    deleted_count: int = 0
