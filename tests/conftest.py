"""Shared test fixtures.

Tests run against a throwaway SQLite database (aiosqlite) created from the
ORM metadata; Redis is never initialized, so rate limiting passes through.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from imf.config import get_settings
from imf.database import close_db, get_engine, get_session, init_db
from imf.db.base import Base
from imf.db.models import User
from imf.main import create_app

TEST_JWT_SECRET = "test-secret-0123456789abcdef0123456789abcdef"
TEST_PASSWORD = "SecureP@ss1"


@pytest.fixture(autouse=True)
def test_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Point settings at a per-test SQLite file and a fixed JWT secret."""
    monkeypatch.setenv("IMF_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'imf_test.db'}")
    monkeypatch.setenv("IMF_JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("IMF_LOG_FORMAT", "console")
    monkeypatch.setenv("IMF_ENVIRONMENT", "test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Create the schema in a fresh database."""
    await init_db(get_settings().database_url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await close_db()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """Get a direct database session for service tests and assertions."""
    sessions = get_session()
    session = await sessions.__anext__()
    yield session
    await sessions.aclose()


@pytest_asyncio.fixture
async def client(database: None) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to a fresh app instance."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def make_user(db: AsyncSession, username: str) -> User:
    """Insert a user directly, bypassing password hashing."""
    user = User(username=username, password_hash="not-a-real-hash")
    db.add(user)
    await db.flush()
    return user


async def register_and_login(client: AsyncClient, username: str, password: str = TEST_PASSWORD) -> str:
    """Register via the API, log in, and return the access token."""
    response = await client.post("/api/v1/auth/register", json={"username": username, "password": password})
    assert response.status_code == 201, response.text
    response = await client.post("/api/v1/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    # The session cookie would take precedence over any Bearer header sent later
    client.cookies.clear()
    return response.json()["access_token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def agent_headers(client: AsyncClient) -> dict[str, str]:
    """Auth headers for agent 'ethan'."""
    return bearer(await register_and_login(client, "ethan"))


@pytest_asyncio.fixture
async def other_agent_headers(client: AsyncClient) -> dict[str, str]:
    """Auth headers for a second agent, 'ilsa'."""
    return bearer(await register_and_login(client, "ilsa"))
