"""User manager: admin account changes and self-service profile edits.

Every applied change is audited against the USER entity type. Accounts that
still own or hold tasks are deactivated rather than deleted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from app.application.dtos.audit_log import FieldChange
from app.application.dtos.user import UserResult
from app.domain.enums import UserRole
from app.domain.exceptions import ValidationException
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced

if TYPE_CHECKING:
    from app.application.interfaces.repositories import ITaskRepository, IUserRepository
    from app.application.interfaces.services import IAuditLogger

logger = get_logger(__name__)

_EDITABLE = ("name", "email", "role", "is_active")


def _clean(values: dict[str, Any]) -> dict[str, Any]:
    cleaned = {k: values[k] for k in _EDITABLE if k in values}
    if "name" in cleaned:
        name = cleaned["name"]
        if not isinstance(name, str) or not name.strip():
            raise ValidationException("Name is required", field="name")
        cleaned["name"] = name.strip()
    if cleaned.get("email") is not None:
        cleaned["email"] = cleaned["email"].strip()
    if "role" in cleaned:
        try:
            cleaned["role"] = UserRole(cleaned["role"])
        except ValueError as e:
            raise ValidationException(
                f"Invalid role {cleaned['role']!r}; expected one of {', '.join(UserRole.values())}",
                field="role",
            ) from e
    return cleaned


def _diff(before: UserResult, values: dict[str, Any]) -> dict[str, FieldChange]:
    return {
        key: FieldChange(getattr(before, key), value)
        for key, value in values.items()
        if getattr(before, key) != value
    }


class UserManager:
    """Reads and changes user accounts; audit entries name the acting user."""

    def __init__(
        self,
        user_repo: "IUserRepository",
        task_repo: "ITaskRepository",
        audit_logger: "IAuditLogger",
    ) -> None:
        self.user_repo = user_repo
        self.task_repo = task_repo
        self.audit_logger = audit_logger

    async def get_user(self, user_id: int) -> UserResult | None:
        return await self.user_repo.get_by_id(user_id)

    async def _ensure_email_free(self, email: str | None, user_id: int) -> None:
        if not email:
            return
        holder = await self.user_repo.get_by_email(email)
        if holder is not None and holder.id != user_id:
            raise ValidationException("Email already in use", field="email")

    @traced("user_manager.update_user")
    async def update_user(
        self, user_id: int, values: dict[str, Any], acting_user_id: int
    ) -> UserResult | None:
        """Apply name, email, role and is_active; None if the user does not exist.

        Raises:
            ValidationException: Blank name, unknown role, or an email held by
                another account.
        """
        before = await self.user_repo.get_by_id(user_id)
        if before is None:
            return None
        changes = _diff(before, _clean(values))
        if not changes:
            return before
        if "email" in changes:
            await self._ensure_email_free(changes["email"].new, user_id)
        if "is_active" in changes and user_id == acting_user_id:
            raise ValidationException(
                "You cannot change your own account status", field="is_active"
            )

        updated = await self.user_repo.update(
            user_id, {key: change.new for key, change in changes.items()}
        )
        if updated is None:
            return None
        await self.audit_logger.log_user_updated(updated, acting_user_id, changes)
        logger.info(
            "User %s updated by %s: %s", user_id, acting_user_id, ", ".join(changes)
        )
        return updated

    async def update_profile(
        self, user_id: int, name: str | None = None, email: str | None = None
    ) -> UserResult | None:
        """Self-service edit of the caller's own name and email."""
        values: dict[str, Any] = {}
        if name is not None:
            values["name"] = name
        if email is not None:
            values["email"] = email
        return await self.update_user(user_id, values, acting_user_id=user_id)

    @traced("user_manager.set_active")
    async def set_active(
        self, user_id: int, is_active: bool, acting_user_id: int
    ) -> UserResult | None:
        if user_id == acting_user_id:
            raise ValidationException(
                "You cannot change your own account status", field="is_active"
            )
        before = await self.user_repo.get_by_id(user_id)
        if before is None:
            return None
        if before.is_active == is_active:
            return before
        updated = await self.user_repo.update(user_id, {"is_active": is_active})
        if updated is None:
            return None
        await self.audit_logger.log_user_status_changed(updated, acting_user_id)
        logger.info(
            "User %s %s by %s",
            user_id,
            "activated" if is_active else "deactivated",
            acting_user_id,
        )
        return updated

    @traced("user_manager.delete_user")
    async def delete_user(self, user_id: int, acting_user_id: int) -> bool:
        """Delete an account with no tasks; False if it does not exist.

        Raises:
            ValidationException: Deleting yourself, or the user still created
                or is assigned tasks (deactivate them instead).
        """
        if user_id == acting_user_id:
            raise ValidationException("You cannot delete your own account")
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            return False
        involved = await self.task_repo.count_involving(user_id)
        if involved:
            raise ValidationException(
                f"User {user_id} still has {involved} task(s); deactivate the account instead"
            )
        await self.audit_logger.log_user_deleted(user, acting_user_id)
        deleted = await self.user_repo.delete(user_id)
        if deleted:
            logger.info("User %s deleted by %s", user_id, acting_user_id)
        return deleted
