"""Pytest configuration and fixtures

Every test gets its own application built by main.create_app over a private
in-memory SQLite database, so tests never share rows. The environment is
fixed before any workforce module is imported.
"""

import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from dataclasses import dataclass, field  # noqa: E402
from itertools import count  # noqa: E402
from typing import Any, Dict  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from workforce.config import Settings, get_settings  # noqa: E402

get_settings.cache_clear()

from main import create_app  # noqa: E402

DEFAULT_PASSWORD = "secret123"

_emails = count(1)


@dataclass
class Account:
    """A registered user as seen by the tests"""

    id: int
    email: str
    role: str
    password: str
    access_token: str
    refresh_token: str
    user: Dict[str, Any] = field(default_factory=dict)

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}


@pytest.fixture
def app():
    return create_app(Settings())


@pytest.fixture
def client(app):
    # Entering the context runs the lifespan, which creates the schema
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(app, client):
    session = app.state.db.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def register(client):
    """Register a user through the API and return an Account"""

    def _register(role: str = "employee", email: str = None, password: str = DEFAULT_PASSWORD, **extra) -> Account:
        email = email or f"user{next(_emails)}@example.com"
        body = {
            "email": email,
            "password": password,
            "firstName": extra.pop("first_name", "Test"),
            "lastName": extra.pop("last_name", role.title()),
            "role": role,
            **extra,
        }
        response = client.post("/api/auth/register", json=body)
        assert response.status_code == 201, response.text
        data = response.json()
        return Account(
            id=data["user"]["id"],
            email=email,
            role=role,
            password=password,
            access_token=data["tokens"]["accessToken"],
            refresh_token=data["tokens"]["refreshToken"],
            user=data["user"],
        )

    return _register


@pytest.fixture
def create_task(client):
    """Create a task as account and return the response body"""

    def _create(account: Account, **fields) -> Dict[str, Any]:
        body = {"title": "Write report", **fields}
        response = client.post("/api/tasks", json=body, headers=account.headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
