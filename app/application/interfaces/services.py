"""Service interfaces (ports) for the application layer.

Protocols for side-effect collaborators of the task manager: the live
connection registry, mail transport, email template renderer, and the
audit/notification/recurrence services themselves (so they can be faked).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.audit_log import (
        AuditDetails,
        AuditLogResult,
        FieldChange,
    )
    from app.application.dtos.notification import (
        NotificationDispatchResult,
        RenderedEmail,
        TaskNotification,
    )
    from app.application.dtos.task import TaskResult
    from app.application.dtos.user import UserResult
    from app.shared.enums import AuditAction, AuditEntityType


class IConnectionRegistry(Protocol):
    """Registry of open live-socket connections keyed by user id."""

    def is_connected(self, user_id: int) -> bool:
        """Return True if the user has at least one open connection."""

    async def push(self, user_id: int, message: dict[str, Any]) -> int:
        """Send a JSON message to every connection of the user; return deliveries."""


class IMailTransport(Protocol):
    """Outbound mail (subject + HTML body to one address)."""

    async def send(self, to_email: str, subject: str, html: str) -> None:
        """Send the message. Raises NotificationDeliveryException on failure."""


class IEmailTemplateRenderer(Protocol):
    """Renders the email for a task notification."""

    def render(self, notification: TaskNotification, recipient_name: str) -> RenderedEmail:
        """Return subject and HTML body."""


class IAuditLogger(Protocol):
    """Best-effort audit writer (failures are logged, never raised)."""

    async def log(
        self,
        entity_id: int,
        entity_type: AuditEntityType,
        action: AuditAction,
        acting_user_id: int,
        details: AuditDetails,
    ) -> AuditLogResult | None:
        """Write one entry; None if the write failed."""

    async def log_created(self, task: TaskResult, acting_user_id: int) -> AuditLogResult | None:
        """Record task creation."""

    async def log_updated(
        self, task: TaskResult, acting_user_id: int, changes: dict[str, FieldChange]
    ) -> AuditLogResult | None:
        """Record a field-level update."""

    async def log_assigned(
        self, task: TaskResult, acting_user_id: int, previous_assignee_id: int | None
    ) -> AuditLogResult | None:
        """Record an assignment change."""

    async def log_status_changed(
        self, task: TaskResult, acting_user_id: int, old_status: str, new_status: str
    ) -> AuditLogResult | None:
        """Record a status transition."""

    async def log_completed(self, task: TaskResult, acting_user_id: int) -> AuditLogResult | None:
        """Record completion."""

    async def log_deleted(self, task: TaskResult, acting_user_id: int) -> AuditLogResult | None:
        """Record deletion (with the pre-deletion title)."""

    async def log_user_updated(
        self, user: UserResult, acting_user_id: int, changes: dict[str, FieldChange]
    ) -> AuditLogResult | None:
        """Record a profile or role change of a user account."""

    async def log_user_status_changed(
        self, user: UserResult, acting_user_id: int
    ) -> AuditLogResult | None:
        """Record activation or deactivation (user carries the new state)."""

    async def log_user_deleted(self, user: UserResult, acting_user_id: int) -> AuditLogResult | None:
        """Record removal of a user account."""

    async def get_logs(
        self,
        entity_type: AuditEntityType | None = None,
        entity_id: int | None = None,
        user_id: int | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AuditLogResult]:
        """Return entries matching all given filters, newest first."""


class INotificationEmitter(Protocol):
    """Fans a task event out to one user over their enabled channels."""

    async def notify_assigned(
        self, task: TaskResult, assignee_id: int, assigner_name: str
    ) -> NotificationDispatchResult:
        """Tell the assignee they were given the task."""

    async def notify_updated(
        self, task: TaskResult, user_id: int, updater_name: str
    ) -> NotificationDispatchResult:
        """Tell the assignee their task changed."""

    async def notify_completed(
        self, task: TaskResult, user_id: int, completer_name: str
    ) -> NotificationDispatchResult:
        """Tell the creator the task was completed."""


class IRecurringTaskGenerator(Protocol):
    """Materializes child instances of a recurring parent."""

    async def generate_instances(self, parent: TaskResult) -> list[TaskResult]:
        """Create and return the children (empty when nothing to generate)."""
