"""Stats Service — fetches related rows, then derives metrics with core/metrics.py.

Invariants:
    - Every metric is computed from rows fetched up front (no lazy queries inside metrics)
    - Unknown owner ids raise ResourceNotFoundError; owners without rows give "0%" / 0
    - Overdue checks use the injected Clock

Design Decisions:
    - SqlRecordSource is the record-fetch capability of core.repository_protocols,
      bound to one AsyncSession so a summary reads a consistent snapshot
"""

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core import metrics
from taskboard.core.domain_types import ProjectStatus
from taskboard.core.errors import ResourceNotFoundError
from taskboard.core.repository_protocols import Clock
from taskboard.infrastructure.clock import SystemClock
from taskboard.infrastructure.database import DatabaseSessionManager
from taskboard.models import User, Project, Task
from taskboard.schemas.records import UserSummary

logger = logging.getLogger(__name__)


class SqlRecordSource:
    """RecordSource backed by an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def tasks_for_user(
        self, user_id: int, status: str | None = None,
    ) -> Sequence[Task]:
        query = select(Task).where(Task.user_id == user_id)
        if status is not None:
            query = query.where(Task.status == status)
        result = await self._db.execute(query.order_by(Task.id))
        return result.scalars().all()

    async def tasks_for_project(
        self, project_id: int, status: str | None = None,
    ) -> Sequence[Task]:
        query = select(Task).where(Task.project_id == project_id)
        if status is not None:
            query = query.where(Task.status == status)
        result = await self._db.execute(query.order_by(Task.id))
        return result.scalars().all()

    async def projects_for_user(
        self, user_id: int, status: str | None = None,
    ) -> Sequence[Project]:
        query = select(Project).where(Project.user_id == user_id)
        if status is not None:
            query = query.where(Project.status == status)
        result = await self._db.execute(query.order_by(Project.id))
        return result.scalars().all()


async def _require(db: AsyncSession, model: type, entity: str, record_id: int):
    row = await db.get(model, record_id)
    if row is None:
        raise ResourceNotFoundError(entity, record_id)
    return row


class StatsService:
    """Read-only metrics over stored records."""

    def __init__(self, db: DatabaseSessionManager, clock: Clock | None = None):
        self._db = db
        self._clock = clock or SystemClock()

    async def user_completion_rate(self, user_id: int) -> str:
        async with self._db.session() as db:
            await _require(db, User, "user", user_id)
            tasks = await SqlRecordSource(db).tasks_for_user(user_id)
        return metrics.task_completion_rate(tasks)

    async def project_progress(self, project_id: int) -> str:
        async with self._db.session() as db:
            await _require(db, Project, "project", project_id)
            tasks = await SqlRecordSource(db).tasks_for_project(project_id)
        return metrics.project_progress(project_id, tasks)

    async def active_projects_count(self, user_id: int) -> int:
        async with self._db.session() as db:
            await _require(db, User, "user", user_id)
            projects = await SqlRecordSource(db).projects_for_user(
                user_id, status=ProjectStatus.ACTIVE.value,
            )
        return metrics.active_projects_count(projects)

    async def task_progress(self, task_id: int) -> str:
        async with self._db.session() as db:
            task = await _require(db, Task, "task", task_id)
        return metrics.task_progress(task)

    async def is_task_overdue(self, task_id: int) -> bool:
        async with self._db.session() as db:
            task = await _require(db, Task, "task", task_id)
        return metrics.is_overdue(task, self._clock.now())

    async def overdue_tasks(self, user_id: int) -> list[Task]:
        now = self._clock.now()
        async with self._db.session() as db:
            await _require(db, User, "user", user_id)
            tasks = await SqlRecordSource(db).tasks_for_user(user_id)
        return [t for t in tasks if metrics.is_overdue(t, now)]

    async def user_summary(self, user_id: int) -> UserSummary:
        """Full name, completion rate, active projects and overdue count in one read."""
        now = self._clock.now()
        async with self._db.session() as db:
            user = await _require(db, User, "user", user_id)
            source = SqlRecordSource(db)
            tasks = await source.tasks_for_user(user_id)
            projects = await source.projects_for_user(user_id)
        summary = UserSummary(
            user_id=user.id,
            full_name=metrics.full_name(user),
            task_completion_rate=metrics.task_completion_rate(tasks),
            active_projects=metrics.active_projects_count(projects),
            overdue_tasks=sum(1 for t in tasks if metrics.is_overdue(t, now)),
        )
        logger.debug(
            f"Computed summary for user {user_id}",
            extra={"entity": "user", "record_id": user_id},
        )
        return summary
