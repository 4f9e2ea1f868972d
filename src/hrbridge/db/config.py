"""Database configuration and session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from hrbridge.config.settings import Settings, get_settings

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database.

    SQLite engines take no pool sizing; test runs use NullPool.
    """
    kwargs: dict = {"echo": settings.DEBUG}
    if settings.ENVIRONMENT == "test":
        kwargs["poolclass"] = NullPool
    elif not settings.is_sqlite:
        kwargs["pool_size"] = settings.DATABASE_POOL_SIZE
        kwargs["max_overflow"] = settings.DATABASE_MAX_OVERFLOW
    return create_async_engine(settings.DATABASE_URL, **kwargs)


def get_engine() -> AsyncEngine:
    """Get or create the process-wide engine."""
    global _engine
    if _engine is None:
        _engine = create_engine(get_settings())
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory bound to the process-wide engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


def configure_engine(settings: Settings) -> AsyncEngine:
    """Replace the process-wide engine with one built from ``settings``."""
    global _engine, _session_factory
    _engine = create_engine(settings)
    _session_factory = None
    return _engine


async def init_db(settings: Settings | None = None, create_tables: bool = False) -> None:
    """Initialize the database connection pool.

    Called during application startup to ensure the database is reachable
    before accepting requests.

    Args:
        settings: Settings to build the engine from (global settings if None)
        create_tables: Create missing tables from model metadata (local
            SQLite development; deployed databases use Alembic)
    """
    from hrbridge.db.models import Base

    engine = configure_engine(settings) if settings is not None else get_engine()
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        if create_tables:
            await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections gracefully.

    Called during application shutdown to release all connections
    in the pool.
    """
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Run a block of local reads and writes atomically.

    Commits on success and rolls back on error. When the session already
    holds a transaction, the block runs in a savepoint instead so the
    caller keeps control of the outer commit.

    Usage:
        async with transaction(session):
            employee = await repo.get_by_provider_and_employee_id(...)
            await repo.update(employee, fields)
    """
    if session.in_transaction():
        async with session.begin_nested():
            yield session
    else:
        async with session.begin():
            yield session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI to inject database sessions.

    Usage:
        @app.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            # Use db session here
            pass
    """
    async with get_session_factory()() as session:
        try:
            yield session
        finally:
            await session.close()
