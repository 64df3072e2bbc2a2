"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.audit_log import AuditLogEntryCreate, AuditLogResult
    from app.application.dtos.task import CreateTaskInput, TaskFilters, TaskResult
    from app.application.dtos.user import NotificationPreferences, UserResult
    from app.domain.enums import UserRole
    from app.shared.enums import AuditEntityType


class ITaskRepository(Protocol):
    """Protocol for the task store (DIP)."""

    async def create(self, data: CreateTaskInput) -> TaskResult:
        """Persist a new task; id, created_at and version are assigned here."""

    async def create_many(self, items: Sequence[CreateTaskInput]) -> list[TaskResult]:
        """Persist several tasks atomically; a failure writes none of them."""

    async def get_by_id(self, task_id: int) -> TaskResult | None:
        """Return task by ID."""

    async def update(
        self,
        task_id: int,
        values: dict[str, Any],
        expected_version: int | None = None,
    ) -> TaskResult | None:
        """Merge values into the task and bump its version.

        With expected_version, the write only applies if the stored version
        matches (TaskVersionConflictException otherwise). None if missing.
        """

    async def delete(self, task_id: int) -> bool:
        """Hard delete; False if the task did not exist."""

    async def list_all(self, skip: int = 0, limit: int = 100) -> list[TaskResult]:
        """Return tasks newest first."""

    async def list_by_assignee(self, user_id: int) -> list[TaskResult]:
        """Return tasks assigned to the user."""

    async def list_by_creator(self, user_id: int) -> list[TaskResult]:
        """Return tasks created by the user."""

    async def list_overdue(self, user_id: int, now: datetime) -> list[TaskResult]:
        """Return the user's (assignee or creator) open tasks due before now."""

    async def list_recurring(self) -> list[TaskResult]:
        """Return recurring parents (is_recurring and pattern != NONE)."""

    async def list_children(self, parent_task_id: int) -> list[TaskResult]:
        """Return instances generated from the parent, by due date."""

    async def search(
        self, query: str, filters: TaskFilters | None = None
    ) -> list[TaskResult]:
        """Case-insensitive substring match on title/description, AND-ed with filters."""

    async def count_all(self) -> int:
        """Return total task count."""

    async def get_counts_by_status(self) -> dict[str, int]:
        """Return task counts keyed by status value."""

    async def get_counts_by_priority(self) -> dict[str, int]:
        """Return task counts keyed by priority value."""

    async def count_overdue(self, now: datetime) -> int:
        """Return the number of open tasks due before now (all users)."""

    async def count_recurring(self) -> int:
        """Return the number of recurring parents."""

    async def get_assignee_counts(self) -> list[tuple[int, int, int]]:
        """Return (assignee_id, assigned, completed) for every assignee."""

    async def count_involving(self, user_id: int) -> int:
        """Return the number of tasks the user created or is assigned to."""


class IUserRepository(Protocol):
    """Protocol for the user directory (DIP)."""

    async def get_by_id(self, user_id: int) -> UserResult | None:
        """Return user by ID."""

    async def get_by_username(self, username: str) -> UserResult | None:
        """Return user by username."""

    async def get_by_email(self, email: str) -> UserResult | None:
        """Return the user holding this email address (case-insensitive)."""

    async def exists(self, user_ids: set[int]) -> set[int]:
        """Return the subset of user_ids that exist."""

    async def list_all(self) -> list[UserResult]:
        """Return all users ordered by name."""

    async def create_user(
        self,
        username: str,
        name: str,
        password: str,
        email: str | None = None,
        role: UserRole | None = None,
    ) -> UserResult:
        """Create a user with a hashed password."""

    async def update_notification_preferences(
        self, user_id: int, preferences: NotificationPreferences
    ) -> UserResult | None:
        """Replace the user's notification preferences. None if user missing."""

    async def update(self, user_id: int, values: dict[str, Any]) -> UserResult | None:
        """Set profile fields (name, email, role, is_active). None if user missing."""

    async def delete(self, user_id: int) -> bool:
        """Hard delete; False if the user did not exist."""


class IAuditLogRepository(Protocol):
    """Protocol for the append-only audit log store (DIP)."""

    async def create(self, entry: AuditLogEntryCreate) -> AuditLogResult:
        """Append one audit record."""

    async def list_entries(
        self,
        entity_type: AuditEntityType | None = None,
        entity_id: int | None = None,
        user_id: int | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AuditLogResult]:
        """Return entries newest first (ties by id descending)."""
