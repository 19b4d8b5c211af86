"""Record Service — validated create/update/delete for users, projects, tasks and tags.

Invariants:
    - Every write is one transaction: validation failure or DB error leaves nothing behind
    - Create runs every validator of the entity; update runs only the validators of
      changed fields (plus fields whose rule reads a changed field)
    - "now" is captured once per operation from the injected Clock
    - Email is lower-cased after validation, before insert/update
    - Observer notified only after commit

Design Decisions:
    - Imperative shell around the pure validator registry: this module does the IO,
      core/validation.py decides
    - One private _create/_update/_delete path shared by all four entities; the public
      per-entity methods only pick the schema and the model
    - Parent existence checked explicitly so a dangling user_id/project_id surfaces as
      ResourceNotFoundError instead of an opaque foreign key failure
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.config import get_settings
from taskboard.core.domain_types import (
    Entity, TagId, TaskId,
    DEFAULT_TASK_STATUS, DEFAULT_TASK_PRIORITY, DEFAULT_PROJECT_STATUS,
)
from taskboard.core.errors import FieldValidationError, ResourceNotFoundError
from taskboard.core.repository_protocols import Clock, RecordObserver
from taskboard.core.validation import (
    fields_affected_by, normalize_fields, validate_fields,
)
from taskboard.infrastructure.clock import SystemClock
from taskboard.infrastructure.database import DatabaseSessionManager
from taskboard.infrastructure.observability import LoggingObserver, redact
from taskboard.models import User, Project, Task, Tag
from taskboard.schemas.records import (
    UserCreate, UserUpdate, ProjectCreate, ProjectUpdate,
    TaskCreate, TaskUpdate, TagCreate, TagUpdate,
)

logger = logging.getLogger(__name__)

_MODELS: dict[Entity, type] = {
    Entity.USER: User,
    Entity.PROJECT: Project,
    Entity.TASK: Task,
    Entity.TAG: Tag,
}

# (foreign key column, parent entity) per child entity
_PARENTS: dict[Entity, tuple[tuple[str, Entity], ...]] = {
    Entity.PROJECT: (("user_id", Entity.USER),),
    Entity.TASK: (("user_id", Entity.USER), ("project_id", Entity.PROJECT)),
}

_DATE_FIELDS = ("start_date", "end_date", "due_date")


def _to_utc(record: Mapping[str, Any]) -> dict[str, Any]:
    """Store every datetime as UTC; naive values are taken to be UTC already."""
    converted = dict(record)
    for name in _DATE_FIELDS:
        value = converted.get(name)
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            converted[name] = value.astimezone(timezone.utc)
    return converted


def _column_values(row: Any) -> dict[str, Any]:
    return {attr.key: getattr(row, attr.key) for attr in inspect(row).mapper.column_attrs}


class RecordService:
    """Validated persistence for the four record types."""

    def __init__(
        self,
        db: DatabaseSessionManager,
        clock: Clock | None = None,
        observer: RecordObserver | None = None,
        default_tag_color: str | None = None,
    ):
        self._db = db
        self._clock = clock or SystemClock()
        self._observer = observer or LoggingObserver()
        self._default_tag_color = (
            default_tag_color or get_settings().default_tag_color
        )

    # ─── Users ───────────────────────────────────────────────────

    async def create_user(self, payload: UserCreate) -> User:
        return await self._create(Entity.USER, payload.to_fields())

    async def update_user(self, user_id: int, payload: UserUpdate) -> User:
        return await self._update(Entity.USER, user_id, payload.to_fields())

    async def delete_user(self, user_id: int) -> None:
        """Deletes the user together with its projects and tasks."""
        await self._delete(Entity.USER, user_id)

    async def get_user(self, user_id: int) -> User:
        return await self._get(Entity.USER, user_id)

    # ─── Projects ────────────────────────────────────────────────

    async def create_project(self, payload: ProjectCreate) -> Project:
        return await self._create(Entity.PROJECT, payload.to_fields())

    async def update_project(self, project_id: int, payload: ProjectUpdate) -> Project:
        return await self._update(Entity.PROJECT, project_id, payload.to_fields())

    async def delete_project(self, project_id: int) -> None:
        """Deletes the project together with its tasks."""
        await self._delete(Entity.PROJECT, project_id)

    async def get_project(self, project_id: int) -> Project:
        return await self._get(Entity.PROJECT, project_id)

    # ─── Tasks ───────────────────────────────────────────────────

    async def create_task(self, payload: TaskCreate) -> Task:
        return await self._create(Entity.TASK, payload.to_fields())

    async def update_task(self, task_id: int, payload: TaskUpdate) -> Task:
        return await self._update(Entity.TASK, task_id, payload.to_fields())

    async def delete_task(self, task_id: int) -> None:
        """Deletes the task; its tags survive."""
        await self._delete(Entity.TASK, task_id)

    async def get_task(self, task_id: int) -> Task:
        return await self._get(Entity.TASK, task_id)

    # ─── Tags ────────────────────────────────────────────────────

    async def create_tag(self, payload: TagCreate) -> Tag:
        return await self._create(Entity.TAG, payload.to_fields())

    async def update_tag(self, tag_id: int, payload: TagUpdate) -> Tag:
        return await self._update(Entity.TAG, tag_id, payload.to_fields())

    async def delete_tag(self, tag_id: int) -> None:
        """Deletes the tag; tasks carrying it survive."""
        await self._delete(Entity.TAG, tag_id)

    async def get_tag(self, tag_id: int) -> Tag:
        return await self._get(Entity.TAG, tag_id)

    async def add_tags(self, task_id: TaskId, tag_ids: Iterable[TagId]) -> list[Tag]:
        """Attach tags to a task. Already-attached tags are left as they are."""
        tag_ids = list(tag_ids)
        async with self._db.session() as db:
            task = await self._get_or_404(db, Entity.TASK, task_id)
            attached = {tag.id for tag in task.tags}
            before = len(attached)
            for tag_id in tag_ids:
                tag = await self._get_or_404(db, Entity.TAG, tag_id)
                if tag.id not in attached:
                    task.tags.append(tag)
                    attached.add(tag.id)
            await db.commit()
            tags = list(task.tags)
        if len(attached) > before:
            self._observer.record_updated(
                Entity.TASK.value, task_id, {"tag_ids": sorted(attached)},
            )
        return tags

    async def remove_tags(self, task_id: TaskId, tag_ids: Iterable[TagId]) -> list[Tag]:
        """Detach tags from a task. The tags themselves are kept."""
        drop = set(tag_ids)
        async with self._db.session() as db:
            task = await self._get_or_404(db, Entity.TASK, task_id)
            before = len(task.tags)
            task.tags = [tag for tag in task.tags if tag.id not in drop]
            await db.commit()
            tags = list(task.tags)
        if len(tags) < before:
            self._observer.record_updated(
                Entity.TASK.value, task_id, {"tag_ids": sorted(t.id for t in tags)},
            )
        return tags

    async def list_tags(self, task_id: TaskId) -> list[Tag]:
        async with self._db.session() as db:
            task = await self._get_or_404(db, Entity.TASK, task_id)
            return list(task.tags)

    # ─── Shared Paths ────────────────────────────────────────────

    def _defaults(self, entity: Entity, now: datetime) -> dict[str, Any]:
        if entity == Entity.TASK:
            return {
                "status": DEFAULT_TASK_STATUS.value,
                "priority": DEFAULT_TASK_PRIORITY.value,
            }
        if entity == Entity.PROJECT:
            return {"status": DEFAULT_PROJECT_STATUS.value, "start_date": now}
        if entity == Entity.TAG:
            return {"color": self._default_tag_color}
        return {}

    def _validate(
        self,
        entity: Entity,
        record: Mapping[str, Any],
        now: datetime,
        fields: Iterable[str] | None = None,
    ) -> None:
        try:
            validate_fields(entity, record, now, fields)
        except FieldValidationError as e:
            logger.warning(
                f"Rejected {entity.value}.{e.field}: {e.message}",
                extra={
                    "entity": entity.value, "field": e.field, "error_code": e.code,
                },
            )
            raise

    async def _create(self, entity: Entity, fields: dict[str, Any]) -> Any:
        now = self._clock.now()
        record = {**self._defaults(entity, now), **fields}
        self._validate(entity, record, now)
        record = _to_utc(normalize_fields(entity, record))

        async with self._db.session() as db:
            await self._check_parents(db, entity, record, required=True)
            row = _MODELS[entity](**record)
            db.add(row)
            await db.commit()
            await db.refresh(row)

        self._observer.record_created(
            entity.value, row.id, redact({"id": row.id, **record}),
        )
        return row

    async def _update(
        self, entity: Entity, record_id: int, changes: dict[str, Any],
    ) -> Any:
        now = self._clock.now()
        async with self._db.session() as db:
            row = await self._get_or_404(db, entity, record_id)
            merged = {**_column_values(row), **changes}
            self._validate(
                entity, merged, now, fields_affected_by(entity, changes),
            )
            changes = _to_utc(normalize_fields(entity, changes))
            await self._check_parents(db, entity, changes)
            for name, value in changes.items():
                setattr(row, name, value)
            await db.commit()
            await db.refresh(row)

        if changes:
            self._observer.record_updated(entity.value, record_id, redact(changes))
        return row

    async def _delete(self, entity: Entity, record_id: int) -> None:
        async with self._db.session() as db:
            row = await self._get_or_404(db, entity, record_id)
            await db.delete(row)
            await db.commit()
        self._observer.record_deleted(entity.value, record_id)

    async def _get(self, entity: Entity, record_id: int) -> Any:
        async with self._db.session() as db:
            return await self._get_or_404(db, entity, record_id)

    async def _get_or_404(
        self, db: AsyncSession, entity: Entity, record_id: int | None,
    ) -> Any:
        row = None
        if record_id is not None:
            row = await db.get(_MODELS[entity], record_id)
        if row is None:
            raise ResourceNotFoundError(entity.value, record_id)
        return row

    async def _check_parents(
        self,
        db: AsyncSession,
        entity: Entity,
        record: Mapping[str, Any],
        required: bool = False,
    ) -> None:
        """Create checks every parent; update only the references it changes."""
        for column, parent in _PARENTS.get(entity, ()):
            if required or column in record:
                await self._get_or_404(db, parent, record.get(column))
