"""Tag ORM — shared label attached to tasks through task_tags.

Invariants:
    - name is unique (DB constraint, surfaced as ConflictError)
    - color is #RGB or #RRGGBB (validator registry); default from settings
    - deleting a tag or a task removes only the joining task_tags rows

Design Decisions:
    - task_tags is a plain Table, not a model: it carries no attributes of its own
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskboard.core.domain_types import SHORT_STRING, DEFAULT_TAG_COLOR
from taskboard.db.base import Base
from taskboard.models._timestamps import utcnow

task_tags = Table(
    "task_tags",
    Base.metadata,
    Column(
        "task_id", Integer, ForeignKey("tasks.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Tag(Base):
    """Tag entity — many-to-many with Task."""
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(SHORT_STRING), nullable=False, unique=True,
    )
    color: Mapped[str] = mapped_column(
        String(7), nullable=False, default=DEFAULT_TAG_COLOR,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    tasks: Mapped[list["Task"]] = relationship(
        "Task", secondary="task_tags", back_populates="tags",
        passive_deletes=True, lazy="selectin",
    )
