"""
Blog Backend — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite file (aiosqlite) with the schema
       created from Base.metadata, a fresh app from create_app() whose
       get_db_session dependency points at that file, and an HTTPX
       AsyncClient talking to the app in-process.

Fixture Hierarchy (all function-scoped):
    db_engine ── session_factory ─┬─ db_session       (service-level tests)
                                  ├─ app ── test_client (HTTP-level tests)
                                  ├─ count_rows
                                  └─ fetch_post
    mock_db_session                                    (pure unit tests)
"""

import os

# Override settings for testing BEFORE any blog imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["BCRYPT_ROUNDS"] = "4"  # bcrypt minimum; keeps hashing fast
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import blog.models  # noqa: F401  (registers tables on Base.metadata)
from blog.database import Base, get_db_session
from blog.main import create_app
from blog.models import Post, User

DEFAULT_EMAIL = "author@example.com"
DEFAULT_PASSWORD = "s3cret-pass"


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'blog_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """A MagicMock standing in for AsyncSession in pure unit tests."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def count_rows(session_factory):
    """count_rows(Model) -> number of rows currently committed."""
    async def _count(model) -> int:
        async with session_factory() as session:
            result = await session.execute(select(func.count()).select_from(model))
            return result.scalar_one()
    return _count


@pytest.fixture
def fetch_post(session_factory):
    """fetch_post(id) -> Post as committed, read through a fresh session."""
    async def _fetch(post_id: int):
        async with session_factory() as session:
            return await session.get(Post, post_id)
    return _fetch


@pytest.fixture
def fetch_user(session_factory):
    async def _fetch(email: str):
        async with session_factory() as session:
            result = await session.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
    return _fetch


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(session_factory):
    """A fresh application whose db dependency uses the per-test database."""
    application = create_app()

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_get_db_session
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the app.

    Redirects are NOT followed, so tests can assert on 303 + Location, and
    the client's cookie jar carries the session between requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def register_user(test_client):
    """register_user(email, password) -> response of POST /users (logs the client in)."""
    async def _register(email: str = DEFAULT_EMAIL, password: str = DEFAULT_PASSWORD):
        return await test_client.post("/users", data={"email": email, "password": password})
    return _register


@pytest.fixture
def submit_post(test_client):
    """submit_post(title, content) -> response of POST /posts."""
    async def _submit(title: str = "Hello", content: str = "World"):
        return await test_client.post("/posts", data={"title": title, "content": content})
    return _submit


@pytest.fixture
def latest_post_id(test_client):
    """Id of the newest post, read from the listing page."""
    async def _latest() -> int:
        response = await test_client.get("/posts")
        return response.json()["locals"]["posts"][0]["id"]
    return _latest


@pytest.fixture
def notices(test_client):
    """notices(path) -> messages shown on the page at `path`."""
    async def _notices(path: str = "/posts"):
        response = await test_client.get(path)
        return [n["message"] for n in response.json()["notices"]]
    return _notices
