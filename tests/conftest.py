"""Pytest configuration and fixtures.

Every test gets its own SQLite file under ``tmp_path`` with migrations
applied.  ``client`` wraps a fresh application in FastAPI's
``TestClient``.
"""

from typing import Callable, Dict

import pytest
from fastapi.testclient import TestClient

from meetup_api.app.core.config import settings
from meetup_api.app.core.db import get_connection, init_db
from meetup_api.app.main import create_app
from meetup_api.app.services import event_service

PASSWORD = "correct horse battery"


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "meetup-test.db"))
    init_db()
    return tmp_path / "meetup-test.db"


@pytest.fixture
def client() -> TestClient:
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def db_rows() -> Callable[..., list]:
    """Run a read query against the test database and return all rows."""

    def query(sql: str, params: tuple = ()) -> list:
        conn = get_connection()
        try:
            return conn.execute(sql, params).fetchall()
        finally:
            conn.close()

    return query


@pytest.fixture
def clock(monkeypatch) -> Callable[[str], None]:
    """Pin the creation timestamp given to new events."""

    def set_now(value: str) -> None:
        monkeypatch.setattr(event_service, "utcnow", lambda: value)

    return set_now


@pytest.fixture
def make_user(client) -> Callable[[str], Dict[str, str]]:
    """Sign up and log in a user; returns its id, token and auth headers."""

    def _make(name: str) -> Dict[str, str]:
        response = client.post(
            "/api/v1/auth/signup",
            json={"email": f"{name.lower()}@example.com", "password": PASSWORD, "username": name},
        )
        assert response.status_code == 201, response.text
        login = client.post("/api/v1/auth/login", json={"username": name, "password": PASSWORD})
        assert login.status_code == 200, login.text
        token = login.json()["accessToken"]
        return {
            "id": response.json()["id"],
            "name": name,
            "token": token,
            "headers": {"Authorization": f"Bearer {token}"},
        }

    return _make


@pytest.fixture
def make_meet(client) -> Callable[..., str]:
    """Create a meet as ``user`` and return its id."""

    def _make(user: Dict[str, str], **overrides) -> str:
        payload = {
            "name": "Sunrise hike",
            "description": "Easy loop, bring water",
            "location": "North trailhead",
            "date": "2026-11-01T07:00:00Z",
            "type": "IN_PERSON",
            "tags": ["outdoors"],
            "images": [],
        }
        payload.update(overrides)
        response = client.post("/api/v1/meets/", json=payload, headers=user["headers"])
        assert response.status_code == 201, response.text
        return response.json()["id"]

    return _make
