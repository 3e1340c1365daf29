"""
NoteStash Backend: Key-Value Store Gateway
===========================================

What:  The only code that talks to the database. Exposes keyed-table
       primitives (conditional put, transactional put, get, prefix query,
       update, delete, count) over the single `(pk, sk)` table.
Who:   Used by UserService, NoteService and StatsService.

Request Model:
    Each public method is one atomic request/response. It opens its own
    session via `session_scope()`, runs, and commits. There is no cross-call
    transaction; the only multi-record atomic write is `transact_put`.

Resilience Strategy:
    Transient failures (dropped connections, pool timeouts, lock timeouts
    reported as OperationalError) are retried with tenacity using
    exponential backoff + jitter. When the retry budget is spent the caller
    gets StoreUnavailableError (→ 503).

    Never retried:
    - IntegrityError: a conditional write lost; retrying cannot change that.
    - Anything else from SQLAlchemy: wrapped in DatabaseError (→ 500).
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, TypeVar

from sqlalchemy import delete, func, select, text
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from notestash.config import settings
from notestash.database import session_scope
from notestash.exceptions import DatabaseError, StoreUnavailableError
from notestash.models.item import Item

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConditionalCheckFailed(Exception):
    """
    A conditional write found its key already present.

    Internal to the data-access layer: services translate it into
    AlreadyExistsError with the resource name that makes sense to callers.
    """

    def __init__(self, keys: List[tuple]):
        self.keys = keys
        super().__init__(f"Conditional write failed for keys {keys}")


def is_transient(exc: BaseException) -> bool:
    """True for store errors that may succeed on a later attempt."""
    if isinstance(exc, IntegrityError):
        return False
    if isinstance(exc, (OperationalError, PoolTimeoutError, ConnectionError, TimeoutError)):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


class KeyValueStore:
    """
    Keyed-table gateway over the `Item` model.

    Args:
        session_factory: Session factory to open per-operation sessions from.
            Defaults to the application's factory; tests pass one bound to an
            in-memory database.
        retry_attempts / retry_min_wait / retry_max_wait: Backoff settings for
            transient failures. Default to the configured settings.
    """

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker] = None,
        retry_attempts: Optional[int] = None,
        retry_min_wait: Optional[float] = None,
        retry_max_wait: Optional[float] = None,
    ):
        self._session_factory = session_factory
        self.retry_attempts = retry_attempts or settings.store_retry_attempts
        self.retry_min_wait = (
            settings.store_retry_min_wait if retry_min_wait is None else retry_min_wait
        )
        self.retry_max_wait = (
            settings.store_retry_max_wait if retry_max_wait is None else retry_max_wait
        )

    # ── Execution ─────────────────────────────────────────────────────────

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception(is_transient),
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential_jitter(
                initial=self.retry_min_wait,
                max=self.retry_max_wait,
                jitter=self.retry_min_wait,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    def _scope(self):
        if self._session_factory is None:
            return session_scope()
        return session_scope(self._session_factory)

    async def _execute(
        self,
        operation: str,
        work: Callable[[AsyncSession], Awaitable[T]],
    ) -> T:
        """Run `work` in a fresh session, retrying transient failures."""
        try:
            async for attempt in self._retrying():
                with attempt:
                    async with self._scope() as session:
                        return await work(session)
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            if is_transient(e):
                logger.error(
                    "Store %s failed after %d attempts: %s",
                    operation,
                    self.retry_attempts,
                    type(e).__name__,
                )
                raise StoreUnavailableError(
                    context={"operation": operation, "attempts": self.retry_attempts},
                ) from e
            logger.error("Store %s failed: %s", operation, str(e), exc_info=True)
            raise DatabaseError(
                context={"operation": operation, "original_error": type(e).__name__},
            ) from e
        except (ConnectionError, TimeoutError) as e:
            logger.error("Store %s unreachable: %s", operation, str(e))
            raise StoreUnavailableError(
                context={"operation": operation, "attempts": self.retry_attempts},
            ) from e
        # Only reachable if the retry loop never ran
        raise DatabaseError(context={"operation": operation})

    # ── Writes ────────────────────────────────────────────────────────────

    async def put(self, attrs: Dict[str, Any], if_not_exists: bool = True) -> Item:
        """
        Write one record.

        With `if_not_exists` (the default) the write fails with
        ConditionalCheckFailed when (pk, sk) is already taken; otherwise the
        record is replaced wholesale.
        """
        return (await self.transact_put([attrs], if_not_exists=if_not_exists))[0]

    async def transact_put(
        self, records: Iterable[Dict[str, Any]], if_not_exists: bool = True
    ) -> List[Item]:
        """
        Write several records atomically: either all land or none do.

        Used to keep a user profile and its email index entry in step.
        """
        records = list(records)

        async def work(session: AsyncSession) -> List[Item]:
            items = [Item(**attrs) for attrs in records]
            if if_not_exists:
                session.add_all(items)
                await session.flush()
                return items
            merged = [await session.merge(item) for item in items]
            await session.flush()
            return merged

        try:
            return await self._execute("put", work)
        except IntegrityError as e:
            keys = [(r.get("pk"), r.get("sk")) for r in records]
            logger.info("Conditional put rejected for %s", keys)
            raise ConditionalCheckFailed(keys) from e

    async def update(self, pk: str, sk: str, attrs: Dict[str, Any]) -> Optional[Item]:
        """
        Set attributes on an existing record.

        Returns the updated record, or None when (pk, sk) does not exist
        (nothing is created). Concurrent updates are last-write-wins.
        """

        async def work(session: AsyncSession) -> Optional[Item]:
            item = await session.get(Item, (pk, sk))
            if item is None:
                return None
            for name, value in attrs.items():
                setattr(item, name, value)
            await session.flush()
            return item

        return await self._execute("update", work)

    async def delete(self, pk: str, sk: str) -> bool:
        """Remove a record. Returns True when something was deleted."""

        async def work(session: AsyncSession) -> bool:
            result = await session.execute(
                delete(Item).where(Item.pk == pk, Item.sk == sk)
            )
            return (result.rowcount or 0) > 0

        return await self._execute("delete", work)

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get(self, pk: str, sk: str) -> Optional[Item]:
        """Direct keyed lookup."""

        async def work(session: AsyncSession) -> Optional[Item]:
            return await session.get(Item, (pk, sk))

        return await self._execute("get", work)

    async def query(self, pk: str, sk_prefix: str = "") -> List[Item]:
        """
        Range query inside one partition.

        Returns every record under `pk` whose sort key starts with
        `sk_prefix`, oldest first (ties broken by sort key).
        """

        async def work(session: AsyncSession) -> List[Item]:
            stmt = select(Item).where(Item.pk == pk)
            if sk_prefix:
                stmt = stmt.where(Item.sk.startswith(sk_prefix, autoescape=True))
            stmt = stmt.order_by(Item.created_at, Item.sk)
            result = await session.execute(stmt)
            return list(result.scalars().all())

        return await self._execute("query", work)

    async def count(self, entity_type: str) -> int:
        """Number of records of one kind across all partitions."""

        async def work(session: AsyncSession) -> int:
            result = await session.execute(
                select(func.count()).select_from(Item).where(Item.entity_type == entity_type)
            )
            return int(result.scalar() or 0)

        return await self._execute("count", work)

    async def ping(self) -> None:
        """Lightweight connectivity probe used by the health check."""

        async def work(session: AsyncSession) -> None:
            await session.execute(text("SELECT 1"))

        await self._execute("ping", work)


# App-wide instance; the engine pool behind it is safe to share.
kv_store = KeyValueStore()
