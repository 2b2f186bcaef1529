"""Async database client with an explicit open/close lifecycle."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from typing import Any

from sqlalchemy.exc import (
    DataError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from workflow_assistant.core.exceptions import (
    ConstraintViolationError,
    StorageError,
    StorageValidationError,
    TransientStorageError,
)
from workflow_assistant.storage.models import Base
from workflow_assistant.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def translate_storage_errors() -> Iterator[None]:
    """Map SQLAlchemy failures onto the storage error hierarchy."""
    try:
        yield
    except IntegrityError as e:
        raise ConstraintViolationError(f"Constraint violation: {e.orig}") from e
    except DataError as e:
        raise StorageValidationError(f"Invalid value: {e.orig}") from e
    except (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError) as e:
        raise TransientStorageError(f"Transient database error: {e}") from e


class Database:
    """
    Session/message store client.

    Constructed once by the host process and passed to the services that
    need it. ``open()`` and ``close()`` are called from the application's
    startup and shutdown hooks.

    Example:
        db = Database("sqlite+aiosqlite:///:memory:")
        await db.open(create_schema=True)
        async with db.transaction() as session:
            session.add(...)
        await db.close()
    """

    def __init__(self, url: str, *, echo: bool = False, **engine_kwargs: Any):
        self.url = url
        self._echo = echo
        self._engine_kwargs = engine_kwargs
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise StorageError("Database is not open")
        return self._engine

    async def open(self, create_schema: bool = False) -> None:
        """Create the engine; optionally create missing tables. Idempotent."""
        if self._engine is None:
            kwargs = dict(self._engine_kwargs)
            if ":memory:" in self.url:
                # One shared connection, otherwise every session sees an empty database
                kwargs.setdefault("poolclass", StaticPool)
                kwargs.setdefault("connect_args", {"check_same_thread": False})

            self._engine = create_async_engine(self.url, echo=self._echo, **kwargs)
            self._sessionmaker = async_sessionmaker(
                bind=self._engine,
                autoflush=False,
                expire_on_commit=False,
            )
            logger.info("database_opened", url=self._engine.url.render_as_string(hide_password=True))

        if create_schema:
            with translate_storage_errors():
                async with self._engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Dispose the engine and its pool. Safe to call twice."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("database_closed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """A plain session for reads."""
        if self._sessionmaker is None:
            raise StorageError("Database is not open")
        async with self._sessionmaker() as session:
            with translate_storage_errors():
                yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """A session inside one transaction: commit on success, rollback on any error."""
        async with self.session() as session:
            with translate_storage_errors():
                async with session.begin():
                    yield session

    async def __aenter__(self) -> "Database":
        await self.open()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
