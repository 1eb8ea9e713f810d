"""Database configuration and session management."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

import config

# Base class for declarative models
Base = declarative_base()


def build_engine(database_url: str, *, echo: bool = False, **engine_kwargs) -> AsyncEngine:
    """
    Create an async engine for the given database URL.

    Args:
        database_url: SQLAlchemy URL with an async driver
            (postgresql+psycopg, sqlite+aiosqlite)
        echo: Log every SQL statement
        **engine_kwargs: Passed through to create_async_engine (poolclass, ...)

    Returns:
        AsyncEngine: New engine (caller owns disposal)
    """
    return create_async_engine(database_url, echo=echo, **engine_kwargs)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to the given engine."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine(config.settings.DATABASE_URL)
AsyncSessionLocal = build_session_factory(engine)


async def get_db() -> AsyncSession:
    """
    Dependency function to get database session.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(bind: AsyncEngine | None = None) -> None:
    """
    Create tables that do not exist yet.

    Called on application startup; production schemas are managed by Alembic,
    this only covers fresh development databases.
    """
    import models  # noqa: F401  (register mappers on Base.metadata)

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """
    Close database connections.
    This should be called on application shutdown.
    """
    await engine.dispose()
