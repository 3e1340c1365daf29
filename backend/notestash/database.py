"""
NoteStash Backend: Database Engine & Session Management
========================================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       per-operation session scope used by the key-value store.
How:   One engine (and its connection pool) is shared by the whole process.
       Every store operation opens its own short-lived session through
       `session_scope()`, commits on success and rolls back on error.

Why per-operation sessions (not per-request):
    The store behaves like a remote keyed table: each call is one atomic
    request/response. Giving each call its own transaction means a failed
    call can be retried in isolation without replaying earlier writes, and
    concurrent callers never share a transaction.

Connection Pooling:
    pool_size / max_overflow / pool_pre_ping come from settings and apply to
    server databases (PostgreSQL). SQLite uses SQLAlchemy's default pool for
    the URL, so those arguments are left out for sqlite URLs.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notestash.config import settings


def build_engine_kwargs(database_url: str) -> Dict[str, Any]:
    """Engine keyword arguments appropriate for the given URL."""
    kwargs: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return kwargs


engine: AsyncEngine = create_async_engine(
    settings.database_url, **build_engine_kwargs(settings.database_url)
)

# expire_on_commit=False: items returned by the store are read after their
# session has closed, so attributes must stay loaded.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for the ORM models (shares one metadata object)."""
    pass


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker = async_session_factory,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a transactional session for a single store operation.

    Commits when the block exits cleanly, rolls back and re-raises otherwise,
    and always closes the session so the connection returns to the pool.

    Example:
        async with session_scope() as session:
            session.add(item)
    """
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_schema(bind: AsyncEngine = engine) -> None:
    """
    Create the key-value table if it does not exist yet.

    Idempotent (CREATE TABLE IF NOT EXISTS semantics via create_all).
    Called from the app lifespan when `auto_create_schema` is enabled and by
    the test fixtures.
    """
    # Registers the Item model on Base.metadata
    from notestash.models import item  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Close every pooled connection. Called during application shutdown."""
    await engine.dispose()
