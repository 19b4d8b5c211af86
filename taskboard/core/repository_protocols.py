"""Boundary Protocols — contracts between the pure core and the shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Record fetching, the clock and change notification reach the core only through these types
    - Implementations provided by the shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in RecordSource: implementations do IO, but the metrics that consume
      the fetched rows are never async themselves
    - RecordObserver replaces process-wide create/update/delete hooks: one observer
      per RecordService instance, no module-level listener state
"""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, Protocol

from taskboard.core.domain_types import UserId, ProjectId


class RecordSource(Protocol):
    """Given an owner id (and optionally a status), return matching rows."""
    async def tasks_for_user(
        self, user_id: UserId, status: str | None = None,
    ) -> Sequence[Any]: ...
    async def tasks_for_project(
        self, project_id: ProjectId, status: str | None = None,
    ) -> Sequence[Any]: ...
    async def projects_for_user(
        self, user_id: UserId, status: str | None = None,
    ) -> Sequence[Any]: ...


class Clock(Protocol):
    """Source of "now" for due-date and overdue checks."""
    def now(self) -> datetime: ...


class RecordObserver(Protocol):
    """Notified after a write has been committed."""
    def record_created(
        self, entity: str, record_id: int, data: Mapping[str, Any],
    ) -> None: ...
    def record_updated(
        self, entity: str, record_id: int, changes: Mapping[str, Any],
    ) -> None: ...
    def record_deleted(self, entity: str, record_id: int) -> None: ...
