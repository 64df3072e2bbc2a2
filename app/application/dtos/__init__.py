"""Application DTOs (no ORM dependency)."""

from app.application.dtos.analytics import AssigneeCompletion, DashboardStats
from app.application.dtos.audit_log import (
    AuditDetails,
    AuditLogEntryCreate,
    AuditLogResult,
    FieldChange,
    TaskAssignedDetails,
    TaskCompletedDetails,
    TaskCreatedDetails,
    TaskDeletedDetails,
    TaskStatusChangedDetails,
    TaskUpdatedDetails,
    UserDeletedDetails,
    UserStatusChangedDetails,
    UserUpdatedDetails,
)
from app.application.dtos.notification import (
    NotificationDispatchResult,
    RenderedEmail,
    TaskNotification,
)
from app.application.dtos.task import (
    UNSET,
    CreateTaskInput,
    RecurringProcessResult,
    TaskFilters,
    TaskResult,
    UpdateTaskPatch,
)
from app.application.dtos.user import NotificationPreferences, UserResult

__all__ = [
    "UNSET",
    "AssigneeCompletion",
    "AuditDetails",
    "AuditLogEntryCreate",
    "AuditLogResult",
    "CreateTaskInput",
    "DashboardStats",
    "FieldChange",
    "NotificationDispatchResult",
    "NotificationPreferences",
    "RecurringProcessResult",
    "RenderedEmail",
    "TaskAssignedDetails",
    "TaskCompletedDetails",
    "TaskCreatedDetails",
    "TaskDeletedDetails",
    "TaskFilters",
    "TaskNotification",
    "TaskResult",
    "TaskStatusChangedDetails",
    "TaskUpdatedDetails",
    "UpdateTaskPatch",
    "UserDeletedDetails",
    "UserResult",
    "UserStatusChangedDetails",
    "UserUpdatedDetails",
]
