"""Task ORM — a dated unit of work inside a project.

Invariants:
    - user_id and project_id are required; deleting either parent deletes the task
    - deleting a task removes its task_tags rows only, never the tags
"""

from datetime import datetime

from sqlalchemy import Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskboard.core.domain_types import (
    LONG_STRING, DEFAULT_TASK_STATUS, DEFAULT_TASK_PRIORITY,
)
from taskboard.db.base import Base
from taskboard.models._timestamps import utcnow


class Task(Base):
    """Task entity — owned by a user, filed under a project, labelled by tags."""
    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(LONG_STRING), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DEFAULT_TASK_STATUS.value, index=True,
    )
    due_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True,
    )
    priority: Mapped[str] = mapped_column(
        String(10), nullable=False, default=DEFAULT_TASK_PRIORITY.value,
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    user: Mapped["User"] = relationship("User", back_populates="tasks")
    project: Mapped["Project"] = relationship("Project", back_populates="tasks")
    tags: Mapped[list["Tag"]] = relationship(
        "Tag", secondary="task_tags", back_populates="tasks",
        passive_deletes=True, lazy="selectin",
    )
