"""Database engine, session dependency and lifecycle helpers.

This module centralizes the async SQLAlchemy session dependency in the
core layer so it can be reused across the application.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from claimflow.core.config import settings
from claimflow.core.exceptions import DatabaseError
from claimflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine, applying pool options only where the driver supports them.

    Args:
        url: SQLAlchemy database URL
        echo: Whether to log emitted SQL

    Returns:
        AsyncEngine: Configured engine
    """
    if url.startswith("postgresql"):
        return create_async_engine(
            url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            echo=echo,
            # Disable prepared statement cache for PgBouncer compatibility
            connect_args={"statement_cache_size": 0},
        )
    return create_async_engine(url, echo=echo)


engine = build_engine(settings.database_url, echo=settings.database_echo)

async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for getting async database session.

    Yields:
        AsyncSession: Database session
    """
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


class DatabaseClient:
    """Database client with connection and schema management."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._connected = False

    async def connect(self) -> bool:
        """Test database connection."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            self._connected = True
            LOGGER.info("Database connection successful")
            return True
        except Exception as e:
            self._connected = False
            LOGGER.error("Database connection failed", exc_info=True)
            raise DatabaseError(f"Database connection failed: {e}", original_error=e) from e

    async def disconnect(self) -> None:
        """Close database connection."""
        await self.engine.dispose()
        self._connected = False
        LOGGER.info("Database connection closed")

    async def create_tables(self) -> None:
        """Create all database tables from SQLAlchemy models.

        This will create tables that don't exist without dropping existing ones.
        """
        # Register mappers on Base.metadata before create_all
        from claimflow.database import models  # noqa: F401

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            LOGGER.info("Database tables created/verified successfully")
        except Exception as e:
            LOGGER.error("Failed to create database tables", exc_info=True, extra={"error": str(e)})
            raise DatabaseError(f"Failed to create database tables: {e}", original_error=e) from e

    async def health_check(self) -> dict:
        """Check database health."""
        try:
            async with self.engine.connect() as conn:
                val = await conn.scalar(text("SELECT 1"))
            self._connected = True
            return {
                "status": "healthy",
                "connected": True,
                "database": self.engine.dialect.name,
                "latency_test": "passed" if val == 1 else "failed",
            }
        except Exception as e:
            self._connected = False
            LOGGER.error("Database health check failed", extra={"error": str(e)})
            return {"status": "unhealthy", "connected": False, "error": str(e)}


db_client = DatabaseClient(engine)


async def init_database(auto_migrate: bool = True) -> None:
    """Initialize database connection and optionally create missing tables.

    Args:
        auto_migrate: Whether to create tables on startup
    """
    LOGGER.info("Initializing database connection...")
    await db_client.connect()
    if auto_migrate:
        await db_client.create_tables()
    LOGGER.info("Database initialization completed")


async def close_database() -> None:
    """Close database connection."""
    try:
        LOGGER.info("Closing database connection...")
        await db_client.disconnect()
    except Exception as e:
        LOGGER.error("Error closing database", exc_info=True, extra={"error": str(e)})
