"""
Database connection and session management.

Provides the async SQLAlchemy engine and session factory. PostgreSQL
(asyncpg) in production; SQLite (aiosqlite) for local runs and tests.
"""

import logging
from typing import AsyncGenerator, Optional, Dict, Any
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
    async_sessionmaker,
    AsyncEngine,
)
from sqlalchemy.pool import NullPool, AsyncAdaptedQueuePool

from config import settings
from ..exceptions import DatabaseConnectionError
from .models import Base

logger = logging.getLogger(__name__)


def normalize_database_url(database_url: str) -> str:
    """Map plain postgres/sqlite URLs onto their async drivers."""
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


class Database:
    """Async engine and session factory for the checklist datastore."""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._initialized = False

    async def initialize(self) -> bool:
        """Build the engine and create the checklist tables if missing."""
        if self._initialized:
            return True

        database_url = self.database_url or settings.database_url
        if not database_url:
            logger.warning("DATABASE_URL not configured; checklist storage disabled")
            return False

        try:
            database_url = normalize_database_url(database_url)
            is_sqlite = database_url.startswith("sqlite")

            # NullPool for tests and SQLite; pooled connections for PostgreSQL
            engine_kwargs: Dict[str, Any] = {}
            if settings.environment == "test" or is_sqlite:
                engine_kwargs["poolclass"] = NullPool
            else:
                engine_kwargs.update(
                    poolclass=AsyncAdaptedQueuePool,
                    pool_size=settings.db_pool_size,
                    max_overflow=settings.db_max_overflow,
                    pool_timeout=settings.db_pool_timeout,
                    pool_recycle=settings.db_pool_recycle,
                    pool_pre_ping=True,
                )
                engine_kwargs["connect_args"] = {
                    "server_settings": {"application_name": "compliance-engine"}
                }
                logger.info(f"PostgreSQL pool: {settings.db_pool_size}+{settings.db_max_overflow}")

            self.engine = create_async_engine(
                database_url,
                echo=settings.database_echo,
                **engine_kwargs
            )

            self.session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

            self._initialized = True
            backend = "sqlite" if is_sqlite else "postgresql"
            logger.info(f"Checklist datastore ready ({backend})")
            return True

        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            return False

    async def close(self):
        """Dispose of the engine."""
        if self.engine:
            await self.engine.dispose()
            self._initialized = False
            logger.info("Database connection closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session; commits on success, rolls back on error."""
        if not self._initialized:
            await self.initialize()

        if not self.session_factory:
            raise DatabaseConnectionError("Database not initialized")

        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error(f"Database session error: {type(e).__name__}: {e}")
                raise

    async def health_check(self) -> dict:
        """Round-trip a trivial query."""
        try:
            async with self.session() as session:
                result = await session.execute(text("SELECT 1"))
                result.scalar()
            return {"status": "healthy", "initialized": self._initialized}
        except Exception as e:
            return {"status": "unhealthy", "error": str(e)}


# Singleton instance
_database: Optional[Database] = None


def get_database() -> Database:
    """Get the database singleton."""
    global _database
    if _database is None:
        _database = Database()
    return _database


async def init_database() -> bool:
    """Initialize the database."""
    db = get_database()
    return await db.initialize()


async def close_database():
    """Close the database connection."""
    global _database
    if _database:
        await _database.close()
        _database = None
