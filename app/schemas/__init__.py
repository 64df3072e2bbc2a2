"""Pydantic request/response schemas for the API."""

from app.schemas.analytics import AssigneeCompletionItem, DashboardStatsResponse
from app.schemas.audit_log import AuditLogEntryResponse
from app.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)
from app.schemas.task import (
    RecurringProcessResponse,
    TaskCreateRequest,
    TaskResponse,
    TaskUpdateRequest,
)
from app.schemas.user import (
    NotificationPreferencesSchema,
    ProfileUpdateRequest,
    UserResponse,
    UserStatusRequest,
    UserUpdateRequest,
)

__all__ = [
    "AssigneeCompletionItem",
    "AuditLogEntryResponse",
    "DashboardStatsResponse",
    "HealthResponse",
    "LoginRequest",
    "NotificationPreferencesSchema",
    "ProfileUpdateRequest",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "RecurringProcessResponse",
    "RegisterRequest",
    "TaskCreateRequest",
    "TaskResponse",
    "TaskUpdateRequest",
    "TokenResponse",
    "UserResponse",
    "UserStatusRequest",
    "UserUpdateRequest",
]
