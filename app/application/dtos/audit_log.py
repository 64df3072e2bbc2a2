"""DTOs for the audit log.

Details are a tagged union keyed by action: each action has its own frozen
dataclass, serialized to a JSON object with camelCase keys when persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Union

from app.shared.enums import AuditAction, AuditEntityType


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, FieldChange):
        return {"from": _jsonable(value.old), "to": _jsonable(value.new)}
    if isinstance(value, dict):
        return {_camel(k): _jsonable(v) for k, v in value.items()}
    return value


class _Details:
    """Shared serialization for audit detail variants."""

    action: ClassVar[AuditAction]

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready details object (camelCase keys)."""
        return {_camel(f.name): _jsonable(getattr(self, f.name)) for f in fields(self)}


@dataclass(frozen=True)
class FieldChange:
    """Before/after value of one task field."""

    old: Any
    new: Any


@dataclass(frozen=True)
class TaskCreatedDetails(_Details):
    action: ClassVar[AuditAction] = AuditAction.CREATED

    task_title: str
    is_recurring: bool
    assigned_to_id: int | None


@dataclass(frozen=True)
class TaskUpdatedDetails(_Details):
    action: ClassVar[AuditAction] = AuditAction.UPDATED

    task_title: str
    changes: dict[str, FieldChange] = field(default_factory=dict)


@dataclass(frozen=True)
class TaskAssignedDetails(_Details):
    action: ClassVar[AuditAction] = AuditAction.ASSIGNED

    task_title: str
    assigned_to_id: int | None
    previous_assigned_to_id: int | None = None


@dataclass(frozen=True)
class TaskStatusChangedDetails(_Details):
    action: ClassVar[AuditAction] = AuditAction.STATUS_CHANGED

    task_title: str
    old_status: str
    new_status: str


@dataclass(frozen=True)
class TaskCompletedDetails(_Details):
    action: ClassVar[AuditAction] = AuditAction.COMPLETED

    task_title: str


@dataclass(frozen=True)
class TaskDeletedDetails(_Details):
    action: ClassVar[AuditAction] = AuditAction.DELETED

    task_title: str


@dataclass(frozen=True)
class UserUpdatedDetails(_Details):
    action: ClassVar[AuditAction] = AuditAction.UPDATED

    username: str
    changes: dict[str, FieldChange] = field(default_factory=dict)


@dataclass(frozen=True)
class UserStatusChangedDetails(_Details):
    """Account activated or deactivated by an admin."""

    action: ClassVar[AuditAction] = AuditAction.STATUS_CHANGED

    username: str
    is_active: bool


@dataclass(frozen=True)
class UserDeletedDetails(_Details):
    action: ClassVar[AuditAction] = AuditAction.DELETED

    username: str


AuditDetails = Union[
    TaskCreatedDetails,
    TaskUpdatedDetails,
    TaskAssignedDetails,
    TaskStatusChangedDetails,
    TaskCompletedDetails,
    TaskDeletedDetails,
    UserUpdatedDetails,
    UserStatusChangedDetails,
    UserDeletedDetails,
]


@dataclass(frozen=True)
class AuditLogEntryCreate:
    """Input for appending one audit log record. Append-only; no update."""

    entity_type: AuditEntityType
    entity_id: int
    action: AuditAction
    user_id: int
    details: dict[str, Any]


@dataclass(frozen=True)
class AuditLogResult:
    """Single audit log entry (read-model for list/get)."""

    id: int
    entity_type: AuditEntityType
    entity_id: int
    action: AuditAction
    user_id: int
    details: dict[str, Any]
    timestamp: datetime
