"""Project ORM — a dated body of work owned by one user.

Invariants:
    - user_id is required; deleting the owner deletes the project
    - end_date > start_date (checked by the validator registry at write time)
    - deleting a project deletes its tasks
"""

from datetime import datetime

from sqlalchemy import Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskboard.core.domain_types import LONG_STRING, DEFAULT_PROJECT_STATUS
from taskboard.db.base import Base
from taskboard.models._timestamps import utcnow


class Project(Base):
    """Project entity — groups tasks under one owner."""
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(LONG_STRING), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DEFAULT_PROJECT_STATUS.value, index=True,
    )
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    user: Mapped["User"] = relationship("User", back_populates="projects")
    tasks: Mapped[list["Task"]] = relationship(
        "Task", back_populates="project",
        cascade="all", passive_deletes=True, lazy="selectin",
    )
