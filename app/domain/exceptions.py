"""Domain exceptions for the task tracker.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class TaskflowException(Exception):
    """Base exception for all application errors.

    Presentation layer maps these to HTTP responses using message,
    error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body used by the HTTP exception handlers."""
        body: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationException(TaskflowException):
    """Raised when input validation fails (empty title, unknown user, bad enum value)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(TaskflowException):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource_type: str, resource_id: int | str) -> None:
        super().__init__(
            f"{resource_type.capitalize()} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class AuthenticationException(TaskflowException):
    """Raised when authentication fails (e.g. invalid credentials or token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(TaskflowException):
    """Raised when the user may not perform the operation on the resource."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'task', 'audit_log').
            action: Optional action that was attempted (e.g. 'update', 'delete').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class TaskVersionConflictException(TaskflowException):
    """Raised when a task was modified concurrently (optimistic version check failed)."""

    def __init__(
        self,
        task_id: int,
        expected_version: int,
        actual_version: int | None = None,
    ) -> None:
        details: dict[str, Any] = {
            "task_id": task_id,
            "expected_version": expected_version,
        }
        if actual_version is not None:
            details["actual_version"] = actual_version
        super().__init__(
            f"Task {task_id} was modified by another request "
            f"(expected version {expected_version})",
            "VERSION_CONFLICT",
            details,
        )


class UserAlreadyExistsException(TaskflowException):
    """Raised when creating a user whose username is already taken."""

    def __init__(self, username: str) -> None:
        super().__init__(
            f"Username '{username}' is already registered",
            "USER_ALREADY_EXISTS",
            {"username": username},
        )


class NotificationDeliveryException(TaskflowException):
    """Raised by a delivery channel (socket push, mail transport) when a send fails.

    Always caught at the notification emitter boundary; never reaches HTTP.
    """

    def __init__(self, channel: str, message: str) -> None:
        super().__init__(
            f"{channel} delivery failed: {message}",
            "NOTIFICATION_DELIVERY_FAILED",
            {"channel": channel},
        )


class AuditWriteException(TaskflowException):
    """Raised when an audit record cannot be written.

    Caught by the audit logger; the triggering task mutation is kept.
    """

    def __init__(self, entity_type: str, entity_id: int, action: str) -> None:
        super().__init__(
            f"Failed to write audit entry {action} for {entity_type} #{entity_id}",
            "AUDIT_WRITE_FAILED",
            {"entity_type": entity_type, "entity_id": entity_id, "action": action},
        )
