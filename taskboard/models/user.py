"""User ORM — account owning projects and tasks.

Invariants:
    - username and email are unique (enforced by the DB, surfaced as ConflictError)
    - email is stored lower-cased (normalized by RecordService before insert)
    - deleting a user deletes its tasks and projects

Design Decisions:
    - Password stored as given: no hashing layer exists in this service
    - cascade="all" + ON DELETE CASCADE FKs: ORM deletes loaded children, the DB covers the rest
    - No delete-orphan: tasks are created from foreign keys, not appended to a parent
"""

from datetime import datetime

from sqlalchemy import Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskboard.core.domain_types import SHORT_STRING, LONG_STRING, EMAIL_STRING
from taskboard.db.base import Base
from taskboard.models._timestamps import utcnow


class User(Base):
    """User account — aggregate root for projects and tasks."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(
        String(SHORT_STRING), nullable=False, unique=True,
    )
    email: Mapped[str] = mapped_column(
        String(EMAIL_STRING), nullable=False, unique=True,
    )
    password: Mapped[str] = mapped_column(String(LONG_STRING), nullable=False)
    first_name: Mapped[str] = mapped_column(String(SHORT_STRING), nullable=False)
    last_name: Mapped[str] = mapped_column(String(SHORT_STRING), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    # Relationships
    tasks: Mapped[list["Task"]] = relationship(
        "Task", back_populates="user",
        cascade="all", passive_deletes=True, lazy="selectin",
    )
    projects: Mapped[list["Project"]] = relationship(
        "Project", back_populates="user",
        cascade="all", passive_deletes=True, lazy="selectin",
    )
