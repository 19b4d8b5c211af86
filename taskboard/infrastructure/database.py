"""Database Session Manager — async connection pool with automatic rollback and error mapping.

Invariants:
    - Every session rolls back on exception (no partial commits leak)
    - Unique-constraint violations become ConflictError (entity + field when known)
    - All other SQLAlchemy exceptions become DatabaseError (core/errors.py)

Design Decisions:
    - Singleton db_manager initialized by init_db(): no global import side effects
    - expire_on_commit=False: prevents lazy-load issues in async context
    - Pool sizing applied only to server databases (SQLite uses a static pool)
"""

import logging
import re
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.errors import ConflictError, DatabaseError
from taskboard.db.session import create_engine, create_session_factory

logger = logging.getLogger(__name__)

_ENTITY_BY_TABLE = {
    "users": "user",
    "projects": "project",
    "tasks": "task",
    "tags": "tag",
}
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (\w+)\.(\w+)")
_PG_UNIQUE = re.compile(r'unique constraint "(\w+?)_(\w+)_key"')


def conflict_from_integrity_error(exc: IntegrityError) -> ConflictError | None:
    """Map a unique-constraint IntegrityError to ConflictError; None for other violations."""
    message = str(exc.orig) if exc.orig is not None else str(exc)
    match = _SQLITE_UNIQUE.search(message) or _PG_UNIQUE.search(message)
    if not match:
        return None
    table, column = match.groups()
    return ConflictError(_ENTITY_BY_TABLE.get(table, table), column)


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        pool_args = {}
        if not database_url.startswith("sqlite"):
            pool_args = {
                "pool_size": pool_size,
                "max_overflow": max_overflow,
                "pool_pre_ping": True,
                "pool_recycle": 3600,
            }
        self.engine = create_engine(database_url, **pool_args)
        self._session_factory = create_session_factory(self.engine)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            conflict = conflict_from_integrity_error(e)
            if conflict is not None:
                logger.warning(
                    f"DB unique violation: {conflict.message}",
                    extra={"entity": conflict.entity, "field": conflict.field},
                )
                raise conflict
            logger.error(f"DB integrity error: {e}")
            raise DatabaseError("Integrity constraint violated", "commit")
        except OperationalError as e:
            await session.rollback()
            logger.error(f"DB operational error: {e}")
            raise DatabaseError("Connection or operational error", "execute")
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"DB driver error: {e}")
            raise DatabaseError("Database driver error", "query")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise DatabaseError("Database operation failed", "unknown")
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except DatabaseError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager
