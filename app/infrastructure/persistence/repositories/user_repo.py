"""User repository (user directory). Interface methods return application DTOs."""

from __future__ import annotations

import asyncio
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.user import NotificationPreferences, UserResult
from app.domain.enums import UserRole
from app.domain.exceptions import UserAlreadyExistsException
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.security.password import get_password_hash, verify_password

# Lazy dummy hash for constant-time comparison when user is not found (timing-attack mitigation).
# Computed on first use in a thread to avoid blocking the event loop at import.
_dummy_hash_cache: str | None = None

_UPDATABLE = frozenset({"name", "email", "role", "is_active"})


async def _get_dummy_hash() -> str:
    """Return a valid bcrypt hash for dummy comparison; computed once in thread pool."""
    global _dummy_hash_cache
    if _dummy_hash_cache is None:
        _dummy_hash_cache = await asyncio.to_thread(
            get_password_hash, "not-a-real-password"
        )
    return _dummy_hash_cache


def _user_to_result(u: User) -> UserResult:
    """Map ORM User to application UserResult (no password)."""
    return UserResult(
        id=u.id,
        username=u.username,
        name=u.name,
        email=u.email,
        role=UserRole(u.role),
        is_active=u.is_active,
        notification_preferences=NotificationPreferences.from_dict(
            u.notification_preferences
        ),
    )


class UserRepository(BaseRepository[User]):
    """User directory: lookup, authentication, account changes, notification preferences."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def _get_by_username(self, username: str) -> User | None:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: int) -> UserResult | None:
        user = await self._get(user_id)
        return _user_to_result(user) if user else None

    async def get_by_username(self, username: str) -> UserResult | None:
        user = await self._get_by_username(username)
        return _user_to_result(user) if user else None

    async def exists(self, user_ids: set[int]) -> set[int]:
        """Return the subset of user_ids that exist."""
        if not user_ids:
            return set()
        result = await self.db.execute(select(User.id).where(User.id.in_(user_ids)))
        return set(result.scalars().all())

    async def list_all(self) -> list[UserResult]:
        result = await self.db.execute(select(User).order_by(User.name, User.id))
        return [_user_to_result(u) for u in result.scalars().all()]

    async def authenticate(self, username: str, password: str) -> UserResult | None:
        """Return the user if the password matches and the account is active."""
        user = await self._get_by_username(username)
        if not user:
            dummy_hash = await _get_dummy_hash()
            await asyncio.to_thread(verify_password, password, dummy_hash)
            return None
        if not user.is_active:
            return None
        if not await asyncio.to_thread(verify_password, password, user.hashed_password):
            return None
        return _user_to_result(user)

    async def create_user(
        self,
        username: str,
        name: str,
        password: str,
        email: str | None = None,
        role: UserRole | None = None,
    ) -> UserResult:
        """Create user; raise UserAlreadyExistsException on duplicate username."""
        hashed = await asyncio.to_thread(get_password_hash, password)
        user = User(
            username=username,
            name=name,
            email=email,
            role=(role or UserRole.USER).value,
            hashed_password=hashed,
            is_active=True,
            notification_preferences=NotificationPreferences().to_dict(),
        )
        try:
            async with self.db.begin_nested():
                created = await self._add(user)
        except IntegrityError:
            raise UserAlreadyExistsException(username) from None
        return _user_to_result(created)

    async def update_notification_preferences(
        self, user_id: int, preferences: NotificationPreferences
    ) -> UserResult | None:
        user = await self._get(user_id)
        if not user:
            return None
        user.notification_preferences = preferences.to_dict()
        await self.db.flush()
        return _user_to_result(user)

    async def get_by_email(self, email: str) -> UserResult | None:
        """Case-insensitive email lookup."""
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.lower()).limit(1)
        )
        user = result.scalar_one_or_none()
        return _user_to_result(user) if user else None

    async def update(self, user_id: int, values: dict[str, Any]) -> UserResult | None:
        """Apply name, email, role and is_active from values; other keys are ignored."""
        user = await self._get(user_id)
        if not user:
            return None
        for key in _UPDATABLE & values.keys():
            value = values[key]
            setattr(user, key, value.value if isinstance(value, UserRole) else value)
        await self.db.flush()
        return _user_to_result(user)

    async def delete(self, user_id: int) -> bool:
        user = await self._get(user_id)
        if not user:
            return False
        await self._remove(user)
        return True
