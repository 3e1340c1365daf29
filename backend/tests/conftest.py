"""
NoteStash Backend: Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment overrides are applied before any `notestash` import so the
       settings singleton picks them up. Every test that touches storage gets
       its own in-memory SQLite database (aiosqlite + StaticPool), so tests
       run against the real SQL the store emits without any shared state.

Fixture Hierarchy (all function-scoped):
    ├── store:         KeyValueStore bound to a fresh in-memory database
    ├── registered:    a user created through UserService
    ├── test_client:   HTTPX AsyncClient over the FastAPI app, store overridden
    └── auth_headers:  X-User-Email header for the registered user
"""

import os

# Must run before notestash.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"  # Minimum cost: keeps hashing fast in tests
os.environ["STORE_RETRY_MIN_WAIT"] = "0"
os.environ["STORE_RETRY_MAX_WAIT"] = "0"
os.environ["AUTO_CREATE_SCHEMA"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from notestash.database import init_schema  # noqa: E402
from notestash.services.user_service import user_service  # noqa: E402
from notestash.store import KeyValueStore  # noqa: E402

TEST_EMAIL = "a@x.com"
TEST_PASSWORD = "secret1"


@pytest_asyncio.fixture
async def store():
    """
    A KeyValueStore over a private in-memory database.

    StaticPool keeps the single in-memory connection alive across the
    per-operation sessions the store opens.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_schema(engine)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield KeyValueStore(
        session_factory=factory,
        retry_attempts=3,
        retry_min_wait=0,
        retry_max_wait=0,
    )
    await engine.dispose()


@pytest_asyncio.fixture
async def registered(store):
    """A user registered as a@x.com / secret1."""
    return await user_service.create_user(store, TEST_EMAIL, TEST_PASSWORD)


@pytest_asyncio.fixture
async def test_client(store):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    The store dependency is overridden so requests hit this test's database.
    """
    from notestash.main import app
    from notestash.routes.deps import get_store

    app.dependency_overrides[get_store] = lambda: store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def auth_headers(registered):
    return {"X-User-Email": registered.email}
