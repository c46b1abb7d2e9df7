from markgraph.doc_store import Database, DocCollection
from markgraph.domain.friend import FriendRequestDoc, FriendshipDoc
from markgraph.errors import NotAllowedError, NotFoundError


class FriendRequestAlreadyExistsError(NotAllowedError):
    def __init__(self, from_user: str, to_user: str) -> None:
        self.from_user = from_user
        self.to_user = to_user
        super().__init__("Friend request between {0} and {1} already exists!", from_user, to_user)


class FriendNotFoundError(NotFoundError):
    def __init__(self, user1: str, user2: str) -> None:
        self.user1 = user1
        self.user2 = user2
        super().__init__("Friendship between {0} and {1} not found!", user1, user2)


class FriendRequestNotFoundError(NotFoundError):
    def __init__(self, from_user: str, to_user: str) -> None:
        self.from_user = from_user
        self.to_user = to_user
        super().__init__("Friend request from {0} to {1} does not exist!", from_user, to_user)


class AlreadyFriendsError(NotAllowedError):
    def __init__(self, user1: str, user2: str) -> None:
        self.user1 = user1
        self.user2 = user2
        super().__init__("{0} and {1} are already friends!", user1, user2)


def _between(user1: str, user2: str) -> dict:
    return {
        "$or": [
            {"user1": user1, "user2": user2},
            {"user1": user2, "user2": user1},
        ]
    }


class FriendingConcept:
    """Friend requests and the friendships they produce.

    A pending request is removed when it is accepted, rejected or withdrawn.
    Accepted and rejected requests are recorded again with their final status.
    A friendship is stored once per pair and read in both directions.
    """

    def __init__(
        self,
        db: Database,
        friends_collection: str = "friends",
        requests_collection: str = "friend_requests",
    ) -> None:
        self.friends = DocCollection(db, friends_collection, FriendshipDoc)
        self.requests = DocCollection(db, requests_collection, FriendRequestDoc)

    def get_requests(self, user: str) -> list[FriendRequestDoc]:
        return self.requests.read_many({"$or": [{"from_user": user}, {"to_user": user}]})

    def send_request(self, from_user: str, to_user: str) -> dict:
        self._can_send_request(from_user, to_user)
        self.requests.create_one({"from_user": from_user, "to_user": to_user, "status": "pending"})
        return {"msg": "Sent request!"}

    def accept_request(self, from_user: str, to_user: str) -> dict:
        self._remove_pending_request(from_user, to_user)
        self.requests.create_one({"from_user": from_user, "to_user": to_user, "status": "accepted"})
        self.friends.create_one({"user1": from_user, "user2": to_user})
        return {"msg": "Accepted request!"}

    def reject_request(self, from_user: str, to_user: str) -> dict:
        self._remove_pending_request(from_user, to_user)
        self.requests.create_one({"from_user": from_user, "to_user": to_user, "status": "rejected"})
        return {"msg": "Rejected request!"}

    def remove_request(self, from_user: str, to_user: str) -> dict:
        self._remove_pending_request(from_user, to_user)
        return {"msg": "Removed request!"}

    def remove_friend(self, user: str, friend: str) -> dict:
        friendship = self.friends.pop_one(_between(user, friend))
        if friendship is None:
            raise FriendNotFoundError(user, friend)
        return {"msg": "Unfriended!"}

    def get_friends(self, user: str) -> list[str]:
        friendships = self.friends.read_many({"$or": [{"user1": user}, {"user2": user}]})
        return [f.user2 if f.user1 == user else f.user1 for f in friendships]

    def _remove_pending_request(self, from_user: str, to_user: str) -> FriendRequestDoc:
        request = self.requests.pop_one(
            {"from_user": from_user, "to_user": to_user, "status": "pending"}
        )
        if request is None:
            raise FriendRequestNotFoundError(from_user, to_user)
        return request

    def _is_not_friends(self, user1: str, user2: str) -> None:
        if user1 == user2 or self.friends.read_one(_between(user1, user2)) is not None:
            raise AlreadyFriendsError(user1, user2)

    def _can_send_request(self, user1: str, user2: str) -> None:
        self._is_not_friends(user1, user2)
        pending = self.requests.read_one(
            {
                "status": "pending",
                "$or": [
                    {"from_user": user1, "to_user": user2},
                    {"from_user": user2, "to_user": user1},
                ],
            }
        )
        if pending is not None:
            raise FriendRequestAlreadyExistsError(user1, user2)
