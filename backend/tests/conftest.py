"""
Behavior Tracker Backend: Test Configuration (conftest.py)
==========================================================

What:  Shared pytest fixtures for the whole suite.
How:   A real DatabaseClient over a throwaway aiosqlite file (tables created
       from the declarative metadata, foreign keys enforced), and an HTTPX
       AsyncClient talking to the FastAPI app with `get_db_client`
       overridden to that client.

Fixture Hierarchy (all function-scoped):
    ├── test_settings:  Settings pointing at the per-test SQLite file
    ├── db_client:      DatabaseClient with every table created
    ├── test_client:    HTTPX AsyncClient bound to the app + db_client
    ├── organization:   one stored organizations row
    └── account:        a signed-up user plus its bearer token
"""

import os
import tempfile

# Settings are read at import time, so the environment is prepared first
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="tracker_test_"), "unused.db"
)
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["JWT_EXPIRES_IN"] = "15m"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Any, AsyncGenerator, Dict  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

import tracker.models  # noqa: E402,F401
from tracker.config import Settings  # noqa: E402
from tracker.database import DatabaseClient, create_engine_from_settings, get_db_client  # noqa: E402

STRONG_PASSWORD = "Str0ngPassword"


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'tracker.db'}",
        jwt_secret="test-secret-not-for-production",
        jwt_expires_in="15m",
    )


@pytest_asyncio.fixture
async def db_client(test_settings) -> AsyncGenerator[DatabaseClient, None]:
    """A DatabaseClient over an empty, fully migrated SQLite database."""
    client = DatabaseClient(create_engine_from_settings(test_settings))
    await client.create_tables()
    yield client
    await client.dispose()


@pytest_asyncio.fixture
async def test_client(db_client) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient for endpoint tests.

    ASGITransport does not run the lifespan, so the app never builds its
    own engine; every route receives `db_client` through the override.
    """
    from tracker.main import app

    app.dependency_overrides[get_db_client] = lambda: db_client
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def organization(db_client) -> Dict[str, Any]:
    [row] = await db_client.insert("organizations", [{"name": "Maple Elementary"}])
    return row


@pytest_asyncio.fixture
async def account(test_client) -> Dict[str, Any]:
    """Signs up `counselor@example.com`; returns the response data plus auth headers."""
    response = await test_client.post(
        "/api/auth/sign-up",
        json={"email": "counselor@example.com", "password": STRONG_PASSWORD},
    )
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    data["headers"] = {"Authorization": f"Bearer {data['token']}"}
    return data
