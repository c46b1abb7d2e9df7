"""Friendship domain models."""

from typing import Literal

from markgraph.domain.base import BaseDoc

RequestStatus = Literal["pending", "accepted", "rejected"]


class FriendshipDoc(BaseDoc):
    """An unordered pair of users who are friends."""

    user1: str
    user2: str


class FriendRequestDoc(BaseDoc):
    """A friend request and its resolution."""

    from_user: str
    to_user: str
    status: RequestStatus = "pending"
