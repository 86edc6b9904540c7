"""Async SQLAlchemy engine for the SQL document store."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from codesync.config import Settings
from codesync.db.base import Base

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


async def init_db(settings: Settings) -> AsyncEngine:
    """Create the engine and session factory, then any missing tables."""
    global _engine, _session_factory  # noqa: PLW0603
    _engine = create_async_engine(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_pool_size,
        pool_pre_ping=True,
    )
    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)
    await create_tables(_engine)
    return _engine


async def create_tables(engine: AsyncEngine) -> None:
    """Create the handles, profile, score and snapshot tables if absent."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    global _engine, _session_factory  # noqa: PLW0603
    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory handed to SqlDocumentStore."""
    if _session_factory is None:
        msg = "Database not initialized. Call init_db() first."
        raise RuntimeError(msg)
    return _session_factory


async def ping_db() -> None:
    """Round-trip a trivial query; raises if the database is unreachable."""
    async with get_session_factory()() as session:
        await session.execute(text("SELECT 1"))
