"""Domain layer: enums, exceptions, and recurrence date arithmetic.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.enums import RecurringPattern, TaskPriority, TaskStatus, UserRole
from app.domain.exceptions import (
    AuditWriteException,
    AuthenticationException,
    AuthorizationException,
    NotificationDeliveryException,
    ResourceNotFoundException,
    TaskflowException,
    TaskVersionConflictException,
    UserAlreadyExistsException,
    ValidationException,
)

__all__ = [
    "AuditWriteException",
    "AuthenticationException",
    "AuthorizationException",
    "NotificationDeliveryException",
    "RecurringPattern",
    "ResourceNotFoundException",
    "TaskPriority",
    "TaskStatus",
    "TaskVersionConflictException",
    "TaskflowException",
    "UserAlreadyExistsException",
    "UserRole",
    "ValidationException",
]
