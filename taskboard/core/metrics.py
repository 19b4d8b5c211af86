"""Metrics — pure percentages and counts derived from already-fetched records.

Invariants:
    - All functions are PURE: no IO, no DB, no implicit queries, never mutate inputs
    - Empty input degrades to "0%" / 0 — metrics have no error path
    - Percentages: completed * 100 / total, rounded half-up to 2 decimals,
      trailing zeros dropped ("50%", "33.33%", "12.5%")
    - Inputs are duck-typed: ORM rows and plain objects with the same attributes both work

Design Decisions:
    - Decimal arithmetic for the percentage: exact halves never drift through float
    - task_progress is a fixed status lookup, not derived from sub-task state
"""

from collections.abc import Iterable
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Protocol

from taskboard.core.domain_types import TaskStatus, ProjectStatus

_CENT = Decimal("0.01")

_PROGRESS_BY_STATUS: dict[str, str] = {
    TaskStatus.COMPLETED.value: "100%",
    TaskStatus.IN_PROGRESS.value: "50%",
    TaskStatus.CANCELLED.value: "0%",
    TaskStatus.PENDING.value: "0%",
}


class TaskLike(Protocol):
    status: Any
    due_date: datetime
    project_id: int


class ProjectLike(Protocol):
    status: Any


class PersonLike(Protocol):
    first_name: str
    last_name: str


def _status_value(status: Any) -> Any:
    return getattr(status, "value", status)


def format_percent(part: int, total: int) -> str:
    """Render part/total as a percentage string. total == 0 gives "0%"."""
    if total == 0:
        return "0%"
    value = (Decimal(part) * 100 / Decimal(total)).quantize(_CENT, ROUND_HALF_UP)
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text}%"


def task_completion_rate(tasks: Iterable[TaskLike]) -> str:
    """Share of completed tasks, e.g. 1 of 2 -> "50%"."""
    statuses = [_status_value(t.status) for t in tasks]
    completed = sum(1 for s in statuses if s == TaskStatus.COMPLETED.value)
    return format_percent(completed, len(statuses))


def project_progress(project_id: int, tasks: Iterable[TaskLike]) -> str:
    """Completion rate of the tasks that belong to project_id only."""
    return task_completion_rate(t for t in tasks if t.project_id == project_id)


def task_progress(task: TaskLike) -> str:
    """completed 100%, in_progress 50%, anything else 0%."""
    return _PROGRESS_BY_STATUS.get(_status_value(task.status), "0%")


def active_projects_count(projects: Iterable[ProjectLike]) -> int:
    return sum(
        1 for p in projects if _status_value(p.status) == ProjectStatus.ACTIVE.value
    )


def is_overdue(task: TaskLike, now: datetime) -> bool:
    """Completed tasks are never overdue; otherwise overdue iff now > due_date."""
    if _status_value(task.status) == TaskStatus.COMPLETED.value:
        return False
    due = task.due_date
    if due.tzinfo is None:
        due = due.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now > due


def full_name(user: PersonLike) -> str:
    return user.first_name + " " + user.last_name
