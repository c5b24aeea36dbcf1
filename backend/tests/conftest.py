"""
Inkwell Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test that needs storage gets its own in-memory SQLite database
       (sqlite+aiosqlite, single static connection, foreign keys on), so tests
       never share rows and need no external services.

Fixture Hierarchy (all function-scoped):
    test_settings  → Settings bound to an in-memory database
    database       → Database handle with tables created
    db_session     → one transactional AsyncSession on that database
    mock_db_session→ AsyncMock session for failure injection
    app            → FastAPI app built by create_app() on `database`
    test_client    → HTTPX AsyncClient talking to `app` over ASGI
"""

import os

# Override settings BEFORE any application import: inkwell.main builds a
# default app at import time from the environment.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SESSION_SECRET"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from inkwell.config import Settings
from inkwell.database import Database
from inkwell.models.user import User


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite://",
        session_secret="test-secret-not-real",
        log_level="WARNING",
        api_prefix="/api",
    )


@pytest_asyncio.fixture
async def database(test_settings):
    """A fresh in-memory database with all tables created."""
    db = Database(test_settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    """
    One session for service-level tests.

    Services only flush; rows written in a test are visible to the rest of
    that test through the same session.
    """
    async with database.session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for driving services into their error paths.

    Usage:
        mock_db_session.execute.side_effect = RuntimeError("connection lost")
        with pytest.raises(DatabaseError):
            await post_service.list_posts(mock_db_session)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.is_modified = MagicMock(return_value=True)
    return session


@pytest.fixture
def app(test_settings, database):
    from inkwell.main import create_app

    return create_app(settings=test_settings, database=database)


@pytest_asyncio.fixture
async def test_client(app):
    """HTTPX AsyncClient routed straight into the app (no server needed)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════

async def make_user(db, email: str, name: Optional[str] = None) -> User:
    """Inserts a user directly and flushes so its id is assigned."""
    user = User(email=email, name=name)
    db.add(user)
    await db.flush()
    return user


async def sign_in(client: AsyncClient, email: str, name: Optional[str] = None) -> Dict[str, Any]:
    """Signs in through the API; returns the session body (token + user)."""
    body: Dict[str, Any] = {"email": email}
    if name is not None:
        body["name"] = name
    response = await client.post("/api/auth/session", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
