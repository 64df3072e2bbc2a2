"""Domain enumerations for the task tracker.

Enums represent fixed sets of domain values (task status, priority,
recurrence pattern, user role). Stored and serialized by value.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings (e.g. for validation or serialization)."""
        return [member.value for member in cls]


class TaskStatus(_ValuesMixin, str, Enum):
    """Task lifecycle status.

    Transitions are permissive: any status can move to any other via update.
    """

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(_ValuesMixin, str, Enum):
    """Task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RecurringPattern(_ValuesMixin, str, Enum):
    """Period between occurrences of a recurring task (NONE = not recurring)."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class UserRole(_ValuesMixin, str, Enum):
    """User role. Admins and managers may act on any task."""

    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"
