"""Task manager: the single entry point for task mutations.

Sequences the task store, recurring generator, audit logger and notification
emitter. Only validation errors, not-found results and version conflicts reach
the caller; audit and notification failures are absorbed by their services.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from app.application.dtos.audit_log import AuditLogResult, FieldChange
from app.application.dtos.task import (
    CreateTaskInput,
    RecurringProcessResult,
    TaskFilters,
    TaskResult,
    UpdateTaskPatch,
)
from app.domain.enums import RecurringPattern, TaskPriority, TaskStatus
from app.domain.exceptions import TaskVersionConflictException, ValidationException
from app.shared.enums import AuditEntityType
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import ensure_utc, utc_now

if TYPE_CHECKING:
    from app.application.interfaces.repositories import ITaskRepository, IUserRepository
    from app.application.interfaces.services import (
        IAuditLogger,
        INotificationEmitter,
        IRecurringTaskGenerator,
    )

logger = get_logger(__name__)

MAX_ERROR_TASK_IDS = 50
UNKNOWN_ACTOR_NAME = "Someone"

_ENUM_FIELDS: dict[str, type[Enum]] = {
    "status": TaskStatus,
    "priority": TaskPriority,
    "recurring_pattern": RecurringPattern,
}
_DATE_FIELDS = ("due_date", "recurring_end_date")
_PROGRAMMING_ERRORS = (AssertionError, AttributeError, NameError, TypeError)


def _coerce_enum(field: str, value: Any) -> Enum:
    enum_cls = _ENUM_FIELDS[field]
    try:
        return enum_cls(value)
    except ValueError as e:
        raise ValidationException(
            f"Invalid {field} {value!r}; expected one of {', '.join(enum_cls.values())}",
            field=field,
        ) from e


def _clean_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationException("Title is required", field="title")
    return title.strip()


def _coerce_date(field: str, value: Any) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, datetime):
        raise ValidationException(f"{field} must be a datetime", field=field)
    return ensure_utc(value)


def _starts_generating(existing: TaskResult, updated: TaskResult) -> bool:
    """True when an update turns the task into a parent that can produce instances.

    Either it became recurring, or a recurring task without a due date got one.
    A parent without a due date never generated, so neither case duplicates.
    """
    if not updated.generates_instances or updated.due_date is None:
        return False
    return not existing.generates_instances or existing.due_date is None


class TaskManager:
    """Creates, updates and deletes tasks and fires their side effects.

    create: store, generate instances (recurring), audit CREATED, notify assignee.
    update: store, generate instances (newly recurring, or recurring and first
    given a due date), notify, audit
    ASSIGNED / STATUS_CHANGED / COMPLETED / UPDATED.
    delete: audit DELETED with the pre-deletion title, then hard delete.

    Users are never notified about their own actions.
    """

    def __init__(
        self,
        task_repo: "ITaskRepository",
        user_repo: "IUserRepository",
        generator: "IRecurringTaskGenerator",
        audit_logger: "IAuditLogger",
        notifier: "INotificationEmitter",
    ) -> None:
        self.task_repo = task_repo
        self.user_repo = user_repo
        self.generator = generator
        self.audit_logger = audit_logger
        self.notifier = notifier

    async def _ensure_users_exist(self, **user_ids: int | None) -> None:
        wanted = {uid for uid in user_ids.values() if uid is not None}
        if not wanted:
            return
        found = await self.user_repo.exists(wanted)
        for field, uid in user_ids.items():
            if uid is not None and uid not in found:
                raise ValidationException(f"User {uid} does not exist", field=field)

    async def _actor_name(self, user_id: int) -> str:
        """Display name for notification text; a failed lookup falls back to a placeholder."""
        try:
            user = await self.user_repo.get_by_id(user_id)
        except _PROGRAMMING_ERRORS:
            raise
        except Exception:
            logger.warning("Actor lookup for user %s failed", user_id, exc_info=True)
            return UNKNOWN_ACTOR_NAME
        if user is None:
            return UNKNOWN_ACTOR_NAME
        return user.name or user.username

    def _validate_create(self, data: CreateTaskInput) -> CreateTaskInput:
        cleaned = replace(
            data,
            title=_clean_title(data.title),
            status=_coerce_enum("status", data.status),
            priority=_coerce_enum("priority", data.priority),
            recurring_pattern=_coerce_enum("recurring_pattern", data.recurring_pattern),
            due_date=_coerce_date("due_date", data.due_date),
            recurring_end_date=_coerce_date("recurring_end_date", data.recurring_end_date),
        )
        if cleaned.parent_task_id is not None and cleaned.is_recurring:
            raise ValidationException(
                "A generated task instance cannot itself be recurring",
                field="is_recurring",
            )
        return cleaned

    def _validate_patch(
        self, patch: UpdateTaskPatch, existing: TaskResult
    ) -> dict[str, Any]:
        values = patch.provided()
        if "title" in values:
            values["title"] = _clean_title(values["title"])
        for field in _ENUM_FIELDS:
            if field in values:
                values[field] = _coerce_enum(field, values[field])
        for field in _DATE_FIELDS:
            if field in values:
                values[field] = _coerce_date(field, values[field])
        if "is_recurring" in values and not isinstance(values["is_recurring"], bool):
            raise ValidationException("is_recurring must be a boolean", field="is_recurring")
        if (
            existing.parent_task_id is not None
            and values.get("is_recurring", existing.is_recurring)
        ):
            raise ValidationException(
                "A generated task instance cannot itself be recurring",
                field="is_recurring",
            )
        return values

    @traced("task_manager.create_task")
    async def create_task(
        self, data: CreateTaskInput, acting_user_id: int
    ) -> TaskResult:
        """Create a task and run its side effects.

        Raises:
            ValidationException: Empty title, bad enum value, or unknown user;
                nothing is written.
        """
        data = self._validate_create(data)
        await self._ensure_users_exist(
            created_by_id=data.created_by_id, assigned_to_id=data.assigned_to_id
        )

        task = await self.task_repo.create(data)
        if task.generates_instances:
            # Instances do not notify individually.
            await self.generator.generate_instances(task)

        await self.audit_logger.log_created(task, acting_user_id)

        if task.assigned_to_id is not None and task.assigned_to_id != acting_user_id:
            await self.notifier.notify_assigned(
                task, task.assigned_to_id, await self._actor_name(acting_user_id)
            )
        return task

    @traced("task_manager.update_task")
    async def update_task(
        self, task_id: int, patch: UpdateTaskPatch, acting_user_id: int
    ) -> TaskResult | None:
        """Apply a partial update and run its side effects.

        Returns:
            The updated task, the unchanged task when the patch changes nothing,
            or None when the task does not exist.

        Raises:
            ValidationException: Invalid patch; nothing is written.
            TaskVersionConflictException: expected_version is stale, or another
                request wrote the task between read and write.
        """
        existing = await self.task_repo.get_by_id(task_id)
        if existing is None:
            return None
        if patch.expected_version is not None and patch.expected_version != existing.version:
            raise TaskVersionConflictException(
                task_id, patch.expected_version, existing.version
            )

        values = self._validate_patch(patch, existing)
        if "assigned_to_id" in values:
            await self._ensure_users_exist(assigned_to_id=values["assigned_to_id"])
        changes = {
            field: FieldChange(getattr(existing, field), value)
            for field, value in values.items()
            if getattr(existing, field) != value
        }
        if not changes:
            return existing

        updated = await self.task_repo.update(
            task_id,
            {field: change.new for field, change in changes.items()},
            expected_version=existing.version,
        )
        if updated is None:
            return None

        if _starts_generating(existing, updated):
            await self.generator.generate_instances(updated)

        await self._notify_update(existing, updated, changes, acting_user_id)
        await self._audit_update(existing, updated, changes, acting_user_id)
        return updated

    async def _notify_update(
        self,
        existing: TaskResult,
        updated: TaskResult,
        changes: dict[str, FieldChange],
        acting_user_id: int,
    ) -> None:
        actor_name: str | None = None

        async def actor() -> str:
            nonlocal actor_name
            if actor_name is None:
                actor_name = await self._actor_name(acting_user_id)
            return actor_name

        assignee = updated.assigned_to_id
        if "assigned_to_id" in changes:
            # Reassignment notifies only the new assignee.
            if assignee is not None and assignee != acting_user_id:
                await self.notifier.notify_assigned(updated, assignee, await actor())
        elif assignee is not None and assignee != acting_user_id:
            await self.notifier.notify_updated(updated, assignee, await actor())

        if (
            "status" in changes
            and updated.status == TaskStatus.COMPLETED
            and updated.created_by_id != acting_user_id
        ):
            await self.notifier.notify_completed(
                updated, updated.created_by_id, await actor()
            )

    async def _audit_update(
        self,
        existing: TaskResult,
        updated: TaskResult,
        changes: dict[str, FieldChange],
        acting_user_id: int,
    ) -> None:
        if "assigned_to_id" in changes:
            await self.audit_logger.log_assigned(
                updated, acting_user_id, existing.assigned_to_id
            )
        if "status" in changes:
            await self.audit_logger.log_status_changed(
                updated,
                acting_user_id,
                existing.status.value,
                updated.status.value,
            )
            if updated.status == TaskStatus.COMPLETED:
                await self.audit_logger.log_completed(updated, acting_user_id)
        await self.audit_logger.log_updated(updated, acting_user_id, changes)

    @traced("task_manager.delete_task")
    async def delete_task(self, task_id: int, acting_user_id: int) -> bool:
        """Delete a task. Returns False (and writes no audit entry) if it does not exist."""
        existing = await self.task_repo.get_by_id(task_id)
        if existing is None:
            return False
        await self.audit_logger.log_deleted(existing, acting_user_id)
        return await self.task_repo.delete(task_id)

    @traced("task_manager.process_recurring_tasks")
    async def process_recurring_tasks(self) -> RecurringProcessResult:
        """Generate instances for every recurring parent.

        Does not de-duplicate against instances generated earlier. A failure on
        one parent is logged and counted; the remaining parents still run.
        """
        result = RecurringProcessResult()
        parents = await self.task_repo.list_recurring()
        for parent in parents:
            result.parents_processed += 1
            try:
                children = await self.generator.generate_instances(parent)
            except _PROGRAMMING_ERRORS:
                raise
            except Exception:
                logger.exception("Recurring generation failed for task %s", parent.id)
                result.error_count += 1
                if len(result.error_task_ids) < MAX_ERROR_TASK_IDS:
                    result.error_task_ids.append(parent.id)
                continue
            result.instances_created += len(children)
        logger.info(
            "Processed %d recurring tasks: %d instances created, %d errors",
            result.parents_processed,
            result.instances_created,
            result.error_count,
        )
        return result

    async def get_task(self, task_id: int) -> TaskResult | None:
        return await self.task_repo.get_by_id(task_id)

    async def list_tasks(self, skip: int = 0, limit: int = 100) -> list[TaskResult]:
        return await self.task_repo.list_all(skip=skip, limit=limit)

    async def list_assigned_to(self, user_id: int) -> list[TaskResult]:
        return await self.task_repo.list_by_assignee(user_id)

    async def list_created_by(self, user_id: int) -> list[TaskResult]:
        return await self.task_repo.list_by_creator(user_id)

    async def list_overdue(
        self, user_id: int, now: datetime | None = None
    ) -> list[TaskResult]:
        return await self.task_repo.list_overdue(user_id, now or utc_now())

    async def search_tasks(
        self, query: str, filters: TaskFilters | None = None
    ) -> list[TaskResult]:
        return await self.task_repo.search(query.strip(), filters)

    async def list_recurring_tasks(self) -> list[TaskResult]:
        return await self.task_repo.list_recurring()

    async def list_instances(self, parent_task_id: int) -> list[TaskResult]:
        return await self.task_repo.list_children(parent_task_id)

    async def get_task_audit_logs(
        self, task_id: int, skip: int = 0, limit: int = 100
    ) -> list[AuditLogResult]:
        """Audit history of one task, newest first."""
        return await self.audit_logger.get_logs(
            entity_type=AuditEntityType.TASK,
            entity_id=task_id,
            skip=skip,
            limit=limit,
        )
