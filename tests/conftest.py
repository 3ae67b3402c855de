"""
Shared fixtures.

The app runs against mongomock behind the real RecordStore, so no MongoDB
server is needed.
"""

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import RecordStore
from main import create_app
from settings import Settings


@pytest.fixture
def settings():
    return Settings(jwt_secret="test-secret", app_environment="production", debug_mode=False)


@pytest.fixture
def store():
    return RecordStore(mongomock.MongoClient()["budget_test"])


@pytest.fixture
def client(settings, store):
    with TestClient(create_app(settings, store)) as c:
        yield c


@pytest.fixture
def register(client):
    """Register a user and return (user, auth headers)."""

    def _register(name="A", email="a@x.com", password="secret1"):
        response = client.post("/api/users/", json={"name": name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        body = response.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _register


@pytest.fixture
def alice(register):
    return register("Alice", "alice@mail.com", "secret1")


@pytest.fixture
def bob(register):
    return register("Bob", "bob@mail.com", "secret2")


@pytest.fixture
def alice_budget(client, alice):
    user, headers = alice
    response = client.post("/api/budgets/", json={"user": user["id"], "month": 5, "year": 2024}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()
