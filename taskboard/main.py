"""Taskboard entry point — wires settings, logging, database and services.

Invariants:
    - Settings read once via get_settings() unless passed explicitly
    - Tables are created on startup if missing (no migration layer)
    - close() disposes the engine; the Taskboard is unusable afterwards

Design Decisions:
    - Plain async factory instead of a web framework lifespan: the HTTP surface
      belongs to the embedding application
    - Services share one DatabaseSessionManager (one pool per process)
"""

import logging
from dataclasses import dataclass

from taskboard.config import Settings, get_settings
from taskboard.core.repository_protocols import Clock, RecordObserver
from taskboard.db.session import create_schema
from taskboard.infrastructure.clock import SystemClock
from taskboard.infrastructure.database import DatabaseSessionManager, init_db
from taskboard.infrastructure.observability import setup_logging
from taskboard.services.records import RecordService
from taskboard.services.stats import StatsService

logger = logging.getLogger(__name__)


@dataclass
class Taskboard:
    """Running application: database manager plus the two services."""
    db: DatabaseSessionManager
    records: RecordService
    stats: StatsService

    async def close(self) -> None:
        await self.db.dispose()
        logger.info("Taskboard shut down")


async def create_taskboard(
    settings: Settings | None = None,
    clock: Clock | None = None,
    observer: RecordObserver | None = None,
    configure_logging: bool = True,
) -> Taskboard:
    """Startup: logging, engine, schema, services."""
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    await create_schema(manager.engine)
    clock = clock or SystemClock()
    board = Taskboard(
        db=manager,
        records=RecordService(
            manager, clock=clock, observer=observer,
            default_tag_color=settings.default_tag_color,
        ),
        stats=StatsService(manager, clock=clock),
    )
    logger.info("Taskboard started", extra={"event": "startup"})
    return board
