"""Shared enumerations for the task tracker.

Cross-cutting enums used by application and infrastructure (audit,
notifications). Task-specific enums (TaskStatus, TaskPriority) live
in app.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class AuditAction(_ValuesMixin, str, Enum):
    """Audit action types recorded by the audit logger."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    ASSIGNED = "assigned"
    STATUS_CHANGED = "status_changed"
    COMPLETED = "completed"


class AuditEntityType(_ValuesMixin, str, Enum):
    """Kind of entity an audit entry refers to."""

    TASK = "task"
    USER = "user"


class NotificationType(_ValuesMixin, str, Enum):
    """Task event a notification describes."""

    ASSIGNED = "assigned"
    UPDATED = "updated"
    COMPLETED = "completed"


class NotificationChannel(_ValuesMixin, str, Enum):
    """Independent delivery path for a notification."""

    IN_APP = "in_app"
    EMAIL = "email"
