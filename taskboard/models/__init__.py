"""ORM Models — SQLAlchemy declarative models for users, projects, tasks and tags.

Invariants:
    - All models inherit from Base (db/base.py)
    - Users own projects and tasks; projects own tasks; tags are shared

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from taskboard.models.user import User  # noqa: F401
from taskboard.models.project import Project  # noqa: F401
from taskboard.models.task import Task  # noqa: F401
from taskboard.models.tag import Tag, task_tags  # noqa: F401
