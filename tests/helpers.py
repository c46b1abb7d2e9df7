from fastapi.testclient import TestClient


def register_and_login(client: TestClient, username: str, password: str) -> TestClient:
    """Register a user through the API and log the client in as that user."""
    response = client.post("/api/users", json={"username": username, "password": password})
    assert response.status_code == 200, f"Registration failed: {response.text}"
    response = client.post("/api/login", json={"username": username, "password": password})
    assert response.status_code == 200, f"Login failed: {response.text}"
    return client


def switch_user(client: TestClient, username: str, password: str) -> TestClient:
    """Log out the current user and log in as another one."""
    response = client.post("/api/logout")
    assert response.status_code == 200, f"Logout failed: {response.text}"
    response = client.post("/api/login", json={"username": username, "password": password})
    assert response.status_code == 200, f"Login failed: {response.text}"
    return client
