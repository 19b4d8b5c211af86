"""Async Engine & Session Factory — shared by DatabaseSessionManager, scripts and tests.

Invariants:
    - SQLite connections run PRAGMA foreign_keys=ON before first use
    - expire_on_commit=False: returned records stay readable after commit

Design Decisions:
    - Separate from infrastructure/database.py: test fixtures need a raw factory
      without the error-mapping wrapper
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)

import taskboard.models  # noqa: F401  registers tables on Base.metadata
from taskboard.db.base import Base


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(database_url: str, **kwargs) -> AsyncEngine:
    """Create an async engine; SQLite engines get foreign key enforcement."""
    engine = create_async_engine(database_url, echo=False, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_session_factory(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine."""
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create every table known to Base.metadata (no-op for existing tables)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
