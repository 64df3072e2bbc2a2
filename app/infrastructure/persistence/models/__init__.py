"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.audit_log import AuditLog
from app.infrastructure.persistence.models.mixins import (
    IntegerIdMixin,
    TimestampMixin,
    VersionedMixin,
)
from app.infrastructure.persistence.models.task import Task
from app.infrastructure.persistence.models.user import User

__all__ = [
    "AuditLog",
    "IntegerIdMixin",
    "Task",
    "TimestampMixin",
    "User",
    "VersionedMixin",
]
