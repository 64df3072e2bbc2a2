"""Audit log ORM model. Append-only record of task and user state changes."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Connection, DateTime, Index, Integer, String, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, Mapper, mapped_column
from sqlalchemy.sql import func

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import IntegerIdMixin
from app.shared.utils.datetime import utc_now


class AuditLog(IntegerIdMixin, Base):
    """Who did what to which entity, and when. No update/delete."""

    __tablename__ = "audit_log"
    __table_args__ = (
        Index("ix_audit_log_entity", "entity_type", "entity_id"),
        Index("ix_audit_log_timestamp", "timestamp"),
    )

    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)
    action: Mapped[str] = mapped_column(String(30), nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    details: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )


@event.listens_for(AuditLog, "before_update")
def _prevent_audit_log_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: AuditLog
) -> None:
    """Audit log entries are append-only; updates are forbidden."""
    raise ValueError("Audit log entries are immutable and cannot be updated.")


@event.listens_for(AuditLog, "before_delete")
def _prevent_audit_log_deletes(
    _mapper: Mapper[Any], _connection: Connection, _target: AuditLog
) -> None:
    """Audit log entries cannot be deleted."""
    raise ValueError("Audit log entries cannot be deleted.")
