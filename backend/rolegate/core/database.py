"""Async database engine and session management.

One :class:`DatabaseSessionManager` owns the engine for the process. Every
call to :meth:`DatabaseSessionManager.session` yields a fresh SQLModel
``AsyncSession`` whose transaction is committed when the block exits
normally and rolled back when it raises, so each store operation maps to a
single unit of work.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from rolegate.core.config import DatabaseConfig
from rolegate.core.errors import InfrastructureError
from rolegate.core.logging import get_logger

logger = get_logger(__name__)


class DatabaseSessionManager:
    """Creates the async engine and hands out transactional sessions."""

    def __init__(self, config: DatabaseConfig):
        """
        Initialize session manager.

        Args:
            config: Database connection settings
        """
        self.config = config
        self.engine: AsyncEngine = create_async_engine(
            config.url, **self._engine_kwargs()
        )
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    def _engine_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"echo": self.config.echo}
        if self.config.is_sqlite:
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self.config.url:
                # every session must see the same in-memory database
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_size"] = self.config.pool_size
            kwargs["max_overflow"] = self.config.max_overflow
            kwargs["pool_pre_ping"] = True
        return kwargs

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get database session with automatic transaction management.

        Yields:
            AsyncSession: Database session
        """
        session = self.session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        else:
            await session.commit()
        finally:
            await session.close()

    async def create_schema(self) -> None:
        """
        Create all tables registered on the SQLModel metadata.

        Raises:
            InfrastructureError: If the schema cannot be created
        """
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
        except SQLAlchemyError as e:
            logger.exception("Failed to create database schema", error=str(e))
            raise InfrastructureError("Failed to create database schema") from e

        logger.info("Database schema ready", tables=len(SQLModel.metadata.tables))

    async def dispose(self) -> None:
        """Dispose the engine and its connection pool."""
        await self.engine.dispose()


__all__ = ["DatabaseSessionManager"]
