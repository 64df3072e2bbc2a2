"""Task ORM model. Recurring parents and their generated instances share the table."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import RecurringPattern, TaskPriority, TaskStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    IntegerIdMixin,
    TimestampMixin,
    VersionedMixin,
)


class Task(IntegerIdMixin, TimestampMixin, VersionedMixin, Base):
    """Unit of work. parent_task_id is a weak back-reference to the recurring parent."""

    __tablename__ = "task"
    __table_args__ = (
        Index("ix_task_assigned_to_status", "assigned_to_id", "status"),
        Index("ix_task_recurring", "is_recurring", "recurring_pattern"),
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskStatus.NOT_STARTED.value, index=True
    )
    priority: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskPriority.MEDIUM.value
    )
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )
    created_by_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("app_user.id"), nullable=False, index=True
    )
    assigned_to_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recurring_pattern: Mapped[str] = mapped_column(
        String(20), nullable=False, default=RecurringPattern.NONE.value
    )
    recurring_end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    parent_task_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("task.id", ondelete="SET NULL"), nullable=True, index=True
    )
