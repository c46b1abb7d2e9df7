"""User domain models."""

from markgraph.domain.base import BaseDoc


class UserDoc(BaseDoc):
    """A registered user. Only a salted hash of the password is kept."""

    username: str
    password_hash: str


class PublicUser(BaseDoc):
    """User record as returned to clients, without credentials."""

    username: str
