from typing import Any

import pytest
from fastapi.testclient import TestClient

from markgraph.api import create_app
from markgraph.concepts import (
    AuthenticatingConcept,
    FriendingConcept,
    GraphingConcept,
    PostingConcept,
    SessioningConcept,
    TaggingConcept,
    WebappingConcept,
)
from markgraph.doc_store import LocalDatabase
from markgraph.graph_maintenance import GraphMaintainer
from tests.helpers import register_and_login


@pytest.fixture(autouse=True)
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Override settings for testing."""
    monkeypatch.setattr("markgraph.config.settings.bcrypt_rounds", 4)
    monkeypatch.setattr("markgraph.config.settings.session_secret", "test-secret")
    monkeypatch.setattr("markgraph.config.settings.strict_tag_delete", False)


@pytest.fixture
def db() -> LocalDatabase:
    """Fresh in-memory database."""
    return LocalDatabase()


@pytest.fixture
def session() -> dict[str, Any]:
    """Stand-in for a cookie-backed session."""
    return {}


@pytest.fixture
def authing(db: LocalDatabase) -> AuthenticatingConcept:
    return AuthenticatingConcept(db, "users")


@pytest.fixture
def sessioning() -> SessioningConcept:
    return SessioningConcept()


@pytest.fixture
def webapping(db: LocalDatabase) -> WebappingConcept:
    return WebappingConcept(db, "webapps")


@pytest.fixture
def tagging(db: LocalDatabase) -> TaggingConcept:
    return TaggingConcept(db, "tags")


@pytest.fixture
def graphing(db: LocalDatabase) -> GraphingConcept:
    return GraphingConcept(db, "graph")


@pytest.fixture
def posting(db: LocalDatabase) -> PostingConcept:
    return PostingConcept(db, "posts")


@pytest.fixture
def friending(db: LocalDatabase) -> FriendingConcept:
    return FriendingConcept(db, "friends", "friend_requests")


@pytest.fixture
def maintainer(
    webapping: WebappingConcept, tagging: TaggingConcept, graphing: GraphingConcept
) -> GraphMaintainer:
    return GraphMaintainer(webapping=webapping, tagging=tagging, graphing=graphing)


@pytest.fixture
def test_client(db: LocalDatabase) -> TestClient:
    """Create test client over a fresh in-memory database."""
    app = create_app(db=db)
    return TestClient(app)


@pytest.fixture
def alice_client(test_client: TestClient) -> TestClient:
    return register_and_login(test_client, "alice", "alice123")
