"""User API schemas."""

from pydantic import EmailStr, Field

from app.domain.enums import UserRole
from app.schemas.base import CamelModel


class UserResponse(CamelModel):
    """User response (no password)."""

    id: int
    username: str
    name: str
    email: str | None = None
    role: UserRole
    is_active: bool


class NotificationPreferencesSchema(CamelModel):
    """Channel flags (inApp, email) and per-event email flags. All default to true."""

    in_app: bool = True
    email: bool = True
    task_assignment: bool = True
    task_status_update: bool = True
    task_completion: bool = True


class UserUpdateRequest(CamelModel):
    """Admin edit of an account. Omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=200)
    email: EmailStr | None = None
    role: UserRole | None = None
    is_active: bool | None = None


class ProfileUpdateRequest(CamelModel):
    """Self-service edit of the caller's name and email."""

    name: str | None = Field(None, min_length=1, max_length=200)
    email: EmailStr | None = None


class UserStatusRequest(CamelModel):
    is_active: bool
