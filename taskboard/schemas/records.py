"""Record Schemas — pydantic models passed to RecordService and returned from StatsService.

Invariants:
    - Create/Update payloads never reject a validated field on their own: any value,
      of any type, reaches the validator registry and fails with a FieldValidationError
    - to_fields() keeps only the keys the caller actually set (exclude_unset), so
      updates re-validate changed fields only and explicit nulls stay visible
    - UserRead never exposes the password

Design Decisions:
    - Validated fields typed as Any: an unknown status or a non-string name must fail
      with InvalidEnum/InvalidFormat/OutOfRange, not a pydantic error
    - Date fields parsed with pydantic's datetime rules when they parse; anything
      else is passed through untouched for the date validators to reject
    - Foreign key ids stay typed as int: they are looked up, not validated
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, TypeAdapter, ValidationError

_DATETIME = TypeAdapter(datetime)


def _parse_datetime(value: Any) -> Any:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return _DATETIME.validate_python(value)
    except ValidationError:
        return value


DateValue = Annotated[Any, BeforeValidator(_parse_datetime)]


class _Payload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


# ─── Create ──────────────────────────────────────────────────────

class UserCreate(_Payload):
    username: Any = None
    email: Any = None
    password: Any = None
    first_name: Any = None
    last_name: Any = None


class ProjectCreate(_Payload):
    name: Any = None
    description: str | None = None
    status: Any = None
    start_date: DateValue = None
    end_date: DateValue = None
    user_id: int | None = None


class TaskCreate(_Payload):
    title: Any = None
    description: str | None = None
    status: Any = None
    due_date: DateValue = None
    priority: Any = None
    user_id: int | None = None
    project_id: int | None = None


class TagCreate(_Payload):
    name: Any = None
    color: Any = None


# ─── Update ──────────────────────────────────────────────────────

class UserUpdate(UserCreate):
    pass


class ProjectUpdate(ProjectCreate):
    pass


class TaskUpdate(TaskCreate):
    pass


class TagUpdate(TagCreate):
    pass


# ─── Read ────────────────────────────────────────────────────────

class _Read(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class UserRead(_Read):
    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    created_at: datetime


class ProjectRead(_Read):
    id: int
    name: str
    description: str | None
    status: str
    start_date: datetime
    end_date: datetime
    user_id: int


class TaskRead(_Read):
    id: int
    title: str
    description: str | None
    status: str
    due_date: datetime
    priority: str
    user_id: int
    project_id: int


class TagRead(_Read):
    id: int
    name: str
    color: str


class UserSummary(BaseModel):
    """Derived view of a user: name plus task/project metrics."""
    user_id: int
    full_name: str
    task_completion_rate: str
    active_projects: int
    overdue_tasks: int
