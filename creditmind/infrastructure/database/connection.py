"""Async engine and transactional session scopes."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from creditmind.core.config import async_driver_url, settings
from creditmind.infrastructure.database.models import Base


class DatabaseSessionManager:
    """
    Owns the process-wide async engine.

    One assessment call sequence runs inside one session scope, so a
    failure part-way through leaves no partially written session.
    """

    def __init__(self):
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    def init(self, database_url: str | None = None, **engine_kwargs):
        """
        Create the engine and the session factory.

        Args:
            database_url: Optional override of settings.database_url
            engine_kwargs: Extra arguments for create_async_engine
        """
        url = async_driver_url(database_url) if database_url else settings.async_database_url

        options = {"echo": settings.debug}
        # SQLite engines use their own pool classes
        if not url.startswith("sqlite"):
            options.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=True,
            )
        options.update(engine_kwargs)

        self._engine = create_async_engine(url, **options)
        self._sessionmaker = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    def _require_engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("DatabaseSessionManager.init() has not been called")
        return self._engine

    async def create_all(self):
        """Create the assessment tables. For local setups and tests."""
        async with self._require_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self):
        """Dispose of the engine; init() must be called again before reuse."""
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Commit on success, roll back on any error.

        Yields:
            An async database session
        """
        self._require_engine()

        session = self._sessionmaker()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


db_manager = DatabaseSessionManager()
