"""Domain Types — enums, identity types and field limits shared across layers.

Invariants:
    - UserId, ProjectId, TaskId, TagId wrap int primary keys
    - All closed value sets encoded as str Enums — no raw string matching
    - Field limits live here, not inline in validators or ORM columns

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: compare equal to the raw strings stored in the DB columns
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)
ProjectId = NewType("ProjectId", int)
TaskId = NewType("TaskId", int)
TagId = NewType("TagId", int)


# ─── Enums ───────────────────────────────────────────────────────

class Entity(str, Enum):
    """Record types known to the validator registry and the observer."""
    USER = "user"
    PROJECT = "project"
    TASK = "task"
    TAG = "tag"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"
    CANCELLED = "cancelled"


class ErrorKind(str, Enum):
    """Structured failure class attached to every field violation."""
    INVALID_FORMAT = "invalid_format"
    OUT_OF_RANGE = "out_of_range"
    INVALID_ENUM = "invalid_enum"
    CONFLICT = "conflict"


# ─── Field Limits ────────────────────────────────────────────────

USERNAME_LENGTH = (3, 30)
PASSWORD_LENGTH = (8, 100)
PERSON_NAME_LENGTH = (2, 50)
TASK_TITLE_LENGTH = (3, 100)
PROJECT_NAME_LENGTH = (3, 100)
TAG_NAME_LENGTH = (1, 50)

# Column widths (upper bounds above fit inside these)
SHORT_STRING = 50
LONG_STRING = 100
EMAIL_STRING = 255


# ─── Defaults ────────────────────────────────────────────────────

DEFAULT_TASK_STATUS = TaskStatus.PENDING
DEFAULT_TASK_PRIORITY = TaskPriority.MEDIUM
DEFAULT_PROJECT_STATUS = ProjectStatus.ACTIVE
DEFAULT_TAG_COLOR = "#3498db"
