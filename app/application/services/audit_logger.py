"""Audit logger: best-effort append-only records of task and user account changes."""

from __future__ import annotations

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
from app.application.dtos.task import TaskResult
from app.application.dtos.user import UserResult
from app.application.interfaces.repositories import IAuditLogRepository
from app.shared.enums import AuditAction, AuditEntityType
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import add_span_event

logger = get_logger(__name__)

# Programming errors are not audit-store failures; let them surface.
_PROGRAMMING_ERRORS = (AssertionError, AttributeError, NameError, TypeError)


class AuditLogger:
    """Writes one audit entry per state-changing action (IAuditLogger).

    A failed write is logged and recorded as an ``audit.write_failed`` span
    event; it never fails or rolls back the task mutation that triggered it.
    """

    def __init__(self, audit_repo: IAuditLogRepository) -> None:
        self.audit_repo = audit_repo

    async def log(
        self,
        entity_id: int,
        entity_type: AuditEntityType,
        action: AuditAction,
        acting_user_id: int,
        details: AuditDetails,
    ) -> AuditLogResult | None:
        """Append one entry. Returns the stored entry, or None when the write failed."""
        if details.action != action:
            raise ValueError(
                f"{type(details).__name__} describes {details.action.value}, not {action.value}"
            )
        entry = AuditLogEntryCreate(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            user_id=acting_user_id,
            details=details.to_payload(),
        )
        try:
            result = await self.audit_repo.create(entry)
        except _PROGRAMMING_ERRORS:
            raise
        except Exception as e:
            logger.exception(
                "Failed to write audit entry %s on %s #%s by user #%s",
                action.value,
                entity_type.value,
                entity_id,
                acting_user_id,
            )
            add_span_event(
                "audit.write_failed",
                {
                    "entity_type": entity_type.value,
                    "entity_id": entity_id,
                    "action": action.value,
                    "error": type(e).__name__,
                },
            )
            return None
        logger.debug(
            "Audit %s on %s #%s by user #%s",
            action.value,
            entity_type.value,
            entity_id,
            acting_user_id,
        )
        return result

    async def _log_task(
        self, task: TaskResult, acting_user_id: int, details: AuditDetails
    ) -> AuditLogResult | None:
        return await self.log(
            task.id, AuditEntityType.TASK, details.action, acting_user_id, details
        )

    async def log_created(
        self, task: TaskResult, acting_user_id: int
    ) -> AuditLogResult | None:
        return await self._log_task(
            task,
            acting_user_id,
            TaskCreatedDetails(
                task_title=task.title,
                is_recurring=task.is_recurring,
                assigned_to_id=task.assigned_to_id,
            ),
        )

    async def log_updated(
        self,
        task: TaskResult,
        acting_user_id: int,
        changes: dict[str, FieldChange],
    ) -> AuditLogResult | None:
        return await self._log_task(
            task,
            acting_user_id,
            TaskUpdatedDetails(task_title=task.title, changes=dict(changes)),
        )

    async def log_assigned(
        self,
        task: TaskResult,
        acting_user_id: int,
        previous_assignee_id: int | None = None,
    ) -> AuditLogResult | None:
        return await self._log_task(
            task,
            acting_user_id,
            TaskAssignedDetails(
                task_title=task.title,
                assigned_to_id=task.assigned_to_id,
                previous_assigned_to_id=previous_assignee_id,
            ),
        )

    async def log_status_changed(
        self,
        task: TaskResult,
        acting_user_id: int,
        old_status: str,
        new_status: str,
    ) -> AuditLogResult | None:
        """Record a status transition; details always carry oldStatus and newStatus."""
        return await self._log_task(
            task,
            acting_user_id,
            TaskStatusChangedDetails(
                task_title=task.title, old_status=old_status, new_status=new_status
            ),
        )

    async def log_completed(
        self, task: TaskResult, acting_user_id: int
    ) -> AuditLogResult | None:
        return await self._log_task(
            task, acting_user_id, TaskCompletedDetails(task_title=task.title)
        )

    async def log_deleted(
        self, task: TaskResult, acting_user_id: int
    ) -> AuditLogResult | None:
        """Record deletion. Call before the row is removed so the title is still known."""
        return await self._log_task(
            task, acting_user_id, TaskDeletedDetails(task_title=task.title)
        )

    async def _log_user(
        self, user: UserResult, acting_user_id: int, details: AuditDetails
    ) -> AuditLogResult | None:
        return await self.log(
            user.id, AuditEntityType.USER, details.action, acting_user_id, details
        )

    async def log_user_updated(
        self,
        user: UserResult,
        acting_user_id: int,
        changes: dict[str, FieldChange],
    ) -> AuditLogResult | None:
        return await self._log_user(
            user,
            acting_user_id,
            UserUpdatedDetails(username=user.username, changes=dict(changes)),
        )

    async def log_user_status_changed(
        self, user: UserResult, acting_user_id: int
    ) -> AuditLogResult | None:
        return await self._log_user(
            user,
            acting_user_id,
            UserStatusChangedDetails(username=user.username, is_active=user.is_active),
        )

    async def log_user_deleted(
        self, user: UserResult, acting_user_id: int
    ) -> AuditLogResult | None:
        """Record account removal. Call before the row is removed."""
        return await self._log_user(
            user, acting_user_id, UserDeletedDetails(username=user.username)
        )

    async def get_logs(
        self,
        entity_type: AuditEntityType | None = None,
        entity_id: int | None = None,
        user_id: int | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AuditLogResult]:
        """Return entries matching all given filters, newest first."""
        return await self.audit_repo.list_entries(
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            skip=skip,
            limit=limit,
        )
