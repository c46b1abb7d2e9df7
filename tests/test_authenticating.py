import pytest

from markgraph.concepts import AuthenticatingConcept
from markgraph.concepts.authenticating import DELETED_USER
from markgraph.errors import BadValuesError, NotAllowedError, NotFoundError


def test_create_and_authenticate(authing: AuthenticatingConcept) -> None:
    created = authing.create("alice", "alice123")

    assert created["msg"] == "User created successfully!"
    assert created["user"].username == "alice"
    assert not hasattr(created["user"], "password_hash"), "Password must be redacted"

    result = authing.authenticate("alice", "alice123")
    assert result["msg"] == "Successfully authenticated."
    assert result["id"] == created["user"].id


def test_password_is_not_stored_in_plaintext(authing: AuthenticatingConcept) -> None:
    authing.create("alice", "alice123")

    stored = authing.users.read_one({"username": "alice"})

    assert stored is not None
    assert stored.password_hash != "alice123"
    assert "alice123" not in stored.password_hash


@pytest.mark.parametrize("username,password", [("", "pw"), ("bob", ""), (None, "pw")])
def test_empty_credentials_are_rejected(
    authing: AuthenticatingConcept, username: str | None, password: str
) -> None:
    with pytest.raises(BadValuesError):
        authing.create(username, password)


def test_duplicate_username_is_rejected(authing: AuthenticatingConcept) -> None:
    authing.create("alice", "alice123")

    with pytest.raises(NotAllowedError, match="User with username alice already exists!"):
        authing.create("alice", "other")
    assert len(authing.get_users()) == 1


def test_wrong_credentials(authing: AuthenticatingConcept) -> None:
    authing.create("alice", "alice123")

    with pytest.raises(NotAllowedError, match="Username or password is incorrect."):
        authing.authenticate("alice", "wrong")
    with pytest.raises(NotAllowedError):
        authing.authenticate("nobody", "alice123")


def test_usernames_are_case_sensitive(authing: AuthenticatingConcept) -> None:
    authing.create("alice", "alice123")
    authing.create("Alice", "other")

    assert {user.username for user in authing.get_users()} == {"alice", "Alice"}


def test_lookups(authing: AuthenticatingConcept) -> None:
    user = authing.create("alice", "alice123")["user"]

    assert authing.get_user_by_username("alice").id == user.id
    assert authing.get_user_by_id(user.id).username == "alice"
    assert [u.username for u in authing.get_users("alice")] == ["alice"]
    assert authing.get_users("bob") == []

    with pytest.raises(NotFoundError, match="User bob not found!"):
        authing.get_user_by_username("bob")
    with pytest.raises(NotFoundError):
        authing.get_user_by_id("missing")


def test_ids_to_usernames_marks_unknown_ids(authing: AuthenticatingConcept) -> None:
    alice = authing.create("alice", "a")["user"]
    bob = authing.create("bob", "b")["user"]

    assert authing.ids_to_usernames([bob.id, "ghost", alice.id]) == ["bob", DELETED_USER, "alice"]


def test_update_username(authing: AuthenticatingConcept) -> None:
    alice = authing.create("alice", "a")["user"]
    authing.create("bob", "b")

    assert authing.update_username(alice.id, "alicia")["msg"] == "Username updated successfully!"
    assert authing.get_user_by_id(alice.id).username == "alicia"

    with pytest.raises(NotAllowedError):
        authing.update_username(alice.id, "bob")
    with pytest.raises(BadValuesError):
        authing.update_username(alice.id, "")


def test_update_password(authing: AuthenticatingConcept) -> None:
    alice = authing.create("alice", "old")["user"]

    with pytest.raises(NotAllowedError, match="The given current password is wrong!"):
        authing.update_password(alice.id, "wrong", "new")
    with pytest.raises(BadValuesError):
        authing.update_password(alice.id, "old", "")

    authing.update_password(alice.id, "old", "new")

    assert authing.authenticate("alice", "new")["id"] == alice.id
    with pytest.raises(NotAllowedError):
        authing.authenticate("alice", "old")


def test_delete(authing: AuthenticatingConcept) -> None:
    alice = authing.create("alice", "a")["user"]

    assert authing.delete(alice.id) == {"msg": "User deleted!"}

    with pytest.raises(NotFoundError):
        authing.assert_user_exists(alice.id)
    assert authing.ids_to_usernames([alice.id]) == [DELETED_USER]


def test_non_string_credentials_are_bad_values(authing: AuthenticatingConcept) -> None:
    with pytest.raises(BadValuesError):
        authing.create(5, "pw")  # type: ignore[arg-type]
    alice = authing.create("alice", "alice123")["user"]

    with pytest.raises(BadValuesError):
        authing.update_username(alice.id, 7)  # type: ignore[arg-type]
    with pytest.raises(BadValuesError):
        authing.update_password(alice.id, "alice123", 7)  # type: ignore[arg-type]
    with pytest.raises(NotAllowedError):
        authing.authenticate("alice", 7)  # type: ignore[arg-type]

    assert [user.username for user in authing.get_users()] == ["alice"]
