"""Async database engine and session factory.

Provides PostgreSQL async connectivity using the SQLAlchemy 2.0 asyncio
extension with the asyncpg driver (any async dialect works, tests use
aiosqlite).

A ``Database`` is constructed once by the application factory and handed to
every component that needs it, so no request can observe a handle that is
not yet connected.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from reelstore.errors import StorageUnavailableError

logger = logging.getLogger(__name__)


class Database:
    """Owns the async engine and the session factory."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        engine_kwargs: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
        if not make_url(url).get_backend_name().startswith("sqlite"):
            engine_kwargs.update(
                pool_size=10,
                max_overflow=20,
                pool_timeout=30,
                pool_recycle=1800,  # Recycle connections after 30 minutes
            )
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Provide a transactional scope around a series of operations.

        Commits on success, rolls back on any exception. SQLAlchemy errors
        are re-raised as ``StorageUnavailableError`` with the cause chained.

        Usage:
            async with database.session() as session:
                await session.execute(...)
        """
        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            raise StorageUnavailableError(f"Database operation failed: {exc}") from exc
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_tables(self) -> None:
        """Create tables if they do not exist."""
        from reelstore.persistence.tables import Base

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(f"Could not initialize database: {exc}") from exc

    async def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
        except StorageUnavailableError:
            logger.warning("Database health check failed", exc_info=True)
            return False
        return True

    async def close(self) -> None:
        """Dispose of pooled connections."""
        await self.engine.dispose()
