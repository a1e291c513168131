"""
Postboard Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite) with the
       real tables, so repositories and routes run their actual SQL.

Fixture Hierarchy (all function-scoped):
    ├── test_settings:   Settings with a test secret and the SQLite URL
    ├── engine:          In-memory engine with tables created
    ├── db_session:      AsyncSession for service-level tests
    ├── mock_db_session: AsyncMock session for failure injection
    ├── app:             create_app() wired to the in-memory engine
    └── test_client:     HTTPX AsyncClient talking to `app`
"""

import os
from typing import AsyncGenerator, Dict
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-not-for-production-use-only"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from postboard.config import Settings
from postboard.database import create_session_factory, create_tables
from postboard.main import create_app
from postboard.models.user import User
from postboard.services.user_directory import gravatar_url

TEST_SECRET = "test-secret-not-for-production-use-only"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite://",
        jwt_secret=TEST_SECRET,
        jwt_expires_in=3600,
        create_tables_on_startup=False,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    One in-memory database per test.

    StaticPool keeps a single connection, so every session sees the same
    in-memory database.
    """
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(eng)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = create_session_factory(engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.get.side_effect = OperationalError("SELECT", {}, Exception())
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def app(test_settings, engine):
    return create_app(settings=test_settings, engine=engine)


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    raise_app_exceptions=False: unexpected errors come back as the 500
    response the client would see instead of propagating into the test.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════

async def make_user(db: AsyncSession, name: str, email: str = "") -> User:
    """Inserts a user row directly; skips password hashing."""
    email = email or f"{name.lower()}@example.com"
    user = User(name=name, email=email, password="not-a-real-hash", avatar=gravatar_url(email))
    db.add(user)
    await db.flush()
    return user


async def register(client: AsyncClient, name: str, email: str, password: str = "secret1") -> str:
    response = await client.post(
        "/api/users", json={"name": name, "email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    return response.json()["token"]


def auth(token: str) -> Dict[str, str]:
    return {"x-auth-token": token}
