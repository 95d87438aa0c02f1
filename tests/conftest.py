"""
Pytest configuration and shared fixtures.
This file ensures the project root is in sys.path for imports and wires the
application to an in-memory mongomock database.
"""

import sys
from pathlib import Path

# Add project root to sys.path so we can import domain, services, etc.
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import mongomock
import pytest
from fastapi.testclient import TestClient

from app.config import settings
from api.dependencies import get_db
from main import app

from test_fixtures import register_user


@pytest.fixture
def db():
    """Fresh in-memory database per test"""
    return mongomock.MongoClient()["lifetrack_test"]


@pytest.fixture
def client(db, monkeypatch):
    """
    TestClient bound to the mongomock database.

    The lifespan is not entered, so no real MongoDB connection is attempted.
    AI and third-party keys are cleared so every test runs offline unless it
    patches the adapters itself.
    """
    monkeypatch.setattr(settings, "password_hash_rounds", 4)
    monkeypatch.setattr(settings, "openai_api_key", None)
    monkeypatch.setattr(settings, "edamam_food_app_id", None)
    monkeypatch.setattr(settings, "edamam_food_app_key", None)
    monkeypatch.setattr(settings, "edamam_recipe_app_id", None)
    monkeypatch.setattr(settings, "edamam_recipe_app_key", None)
    monkeypatch.setattr(settings, "admin_email", "admin@lifetrack.test")
    monkeypatch.setattr(settings, "admin_password", "admin-secret")

    app.dependency_overrides[get_db] = lambda: db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth(client):
    """Registered and logged-in default user: (headers, user)"""
    return register_user(client, "sarah")


@pytest.fixture
def auth_headers(auth):
    return auth[0]


@pytest.fixture
def admin_headers(client):
    r = client.post(
        f"{settings.api_prefix}/auth/login",
        json={"email": settings.admin_email, "password": settings.admin_password},
    )
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
