"""Database connection and session management using SQLAlchemy 2.0 async patterns.

This module provides PostgreSQL database connectivity using asyncpg.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from trailsync.core.config import get_settings

# Global engine and session factory
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get the global async database engine.

    Raises:
        RuntimeError: If database has not been initialized.
    """
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the global async session factory.

    Raises:
        RuntimeError: If database has not been initialized.
    """
    if _async_session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _async_session_factory


async def init_db() -> None:
    """Initialize the database engine and create all tables.

    Called once at job startup. Creates the async engine with a small
    connection pool (the job is sequential) and creates the tables defined
    in the model metadata.
    """
    global _engine, _async_session_factory  # noqa: PLW0603

    settings = get_settings()

    _engine = create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_size=2,
        max_overflow=2,
        pool_pre_ping=True,
    )

    _async_session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    # Import all models to ensure they're registered with Base.metadata
    from trailsync.models import Base, Camera, Picture, SyncResult  # noqa: F401

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close the database engine and cleanup resources."""
    global _engine, _async_session_factory  # noqa: PLW0603

    if _engine is not None:
        try:
            await _engine.dispose()
        finally:
            _engine = None
            _async_session_factory = None
