import bcrypt
from loguru import logger

from markgraph.config import settings
from markgraph.doc_store import Database, DocCollection
from markgraph.domain.user import PublicUser, UserDoc
from markgraph.errors import BadValuesError, NotAllowedError, NotFoundError

DELETED_USER = "DELETED_USER"

# bcrypt only looks at the first 72 bytes of a secret
_BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    secret = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=settings.bcrypt_rounds)).decode("utf-8")


def verify_password(password: str | None, password_hash: str) -> bool:
    if not isinstance(password, str) or not password:
        return False
    secret = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    return bcrypt.checkpw(secret, password_hash.encode("utf-8"))


def redact_password(user: UserDoc) -> PublicUser:
    return PublicUser.model_validate(user.model_dump(exclude={"password_hash"}))


class AuthenticatingConcept:
    """Registers users and checks their credentials.

    Username uniqueness is checked with a read before the write, so two
    concurrent registrations of the same name can both succeed.
    """

    def __init__(self, db: Database, collection_name: str = "users") -> None:
        self.users = DocCollection(db, collection_name, UserDoc)

    def create(self, username: str | None, password: str | None) -> dict:
        self._assert_good_credentials(username, password)
        user_id = self.users.create_one(
            {"username": username, "password_hash": hash_password(password)}
        )
        logger.debug(f"Created user {username} ({user_id})")
        return {"msg": "User created successfully!", "user": self.get_user_by_id(user_id)}

    def get_user_by_id(self, user_id: str) -> PublicUser:
        user = self.users.read_one({"id": user_id})
        if user is None:
            raise NotFoundError("User not found!")
        return redact_password(user)

    def get_user_by_username(self, username: str) -> PublicUser:
        user = self.users.read_one({"username": username})
        if user is None:
            raise NotFoundError("User {0} not found!", username)
        return redact_password(user)

    def ids_to_usernames(self, ids: list[str]) -> list[str]:
        """Resolve user IDs to usernames; unknown IDs become ``DELETED_USER``."""
        users = self.users.read_many({"id": {"$in": list(ids)}})
        id_to_username = {user.id: user.username for user in users}
        return [id_to_username.get(user_id, DELETED_USER) for user_id in ids]

    def get_users(self, username: str | None = None) -> list[PublicUser]:
        # An empty filter returns everyone
        filter = {"username": username} if username else {}
        return [redact_password(user) for user in self.users.read_many(filter)]

    def authenticate(self, username: str | None, password: str | None) -> dict:
        user = self.users.read_one({"username": username}) if username else None
        if user is None or not verify_password(password, user.password_hash):
            raise NotAllowedError("Username or password is incorrect.")
        return {"msg": "Successfully authenticated.", "id": user.id}

    def update_username(self, user_id: str, username: str | None) -> dict:
        if not isinstance(username, str) or not username:
            raise BadValuesError("Username must be non-empty!")
        self._assert_username_unique(username)
        self.users.partial_update_one({"id": user_id}, {"username": username})
        return {"msg": "Username updated successfully!"}

    def update_password(
        self, user_id: str, current_password: str | None, new_password: str | None
    ) -> dict:
        if not isinstance(new_password, str) or not new_password:
            raise BadValuesError("New password must be non-empty!")
        user = self.users.read_one({"id": user_id})
        if user is None:
            raise NotFoundError("User not found")
        if not verify_password(current_password, user.password_hash):
            raise NotAllowedError("The given current password is wrong!")

        self.users.partial_update_one({"id": user_id}, {"password_hash": hash_password(new_password)})
        return {"msg": "Password updated successfully!"}

    def delete(self, user_id: str) -> dict:
        self.users.delete_one({"id": user_id})
        return {"msg": "User deleted!"}

    def assert_user_exists(self, user_id: str) -> None:
        if self.users.read_one({"id": user_id}) is None:
            raise NotFoundError("User not found!")

    def _assert_good_credentials(self, username: str | None, password: str | None) -> None:
        if not isinstance(username, str) or not isinstance(password, str):
            raise BadValuesError("Username and password must be strings!")
        if not username or not password:
            raise BadValuesError("Username and password must be non-empty!")
        self._assert_username_unique(username)

    def _assert_username_unique(self, username: str) -> None:
        if self.users.read_one({"username": username}) is not None:
            raise NotAllowedError("User with username {0} already exists!", username)
