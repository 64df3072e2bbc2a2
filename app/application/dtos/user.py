"""DTOs for user use cases (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from app.domain.enums import UserRole


@dataclass(frozen=True)
class NotificationPreferences:
    """Per-channel and per-event notification switches. All default to on."""

    in_app: bool = True
    email: bool = True
    task_assignment: bool = True
    task_status_update: bool = True
    task_completion: bool = True

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> NotificationPreferences:
        """Build from stored JSON; missing or unknown keys fall back to defaults."""
        if not data:
            return cls()
        known = {k: bool(v) for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass(frozen=True)
class UserResult:
    """User read-model (result of get_by_id, create_user, etc.). No password."""

    id: int
    username: str
    name: str
    email: str | None
    role: UserRole
    is_active: bool
    notification_preferences: NotificationPreferences = field(
        default_factory=NotificationPreferences
    )

    @property
    def is_privileged(self) -> bool:
        """Admins and managers may act on any task."""
        return self.role in (UserRole.ADMIN, UserRole.MANAGER)
