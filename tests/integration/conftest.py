"""Fixtures for repository tests (run on the db_session fixture's session)."""

from collections.abc import Awaitable, Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.enums import UserRole
from app.infrastructure.persistence.models import User

AddUser = Callable[..., Awaitable[int]]


@pytest.fixture
def add_user(db_session: AsyncSession) -> AddUser:
    """Insert a user on the test session and return its id."""

    async def _add(
        username: str, role: UserRole = UserRole.USER, name: str | None = None
    ) -> int:
        user = User(
            username=username,
            name=name or username.capitalize(),
            role=role.value,
            hashed_password="not-a-hash",
            is_active=True,
        )
        db_session.add(user)
        await db_session.flush()
        return user.id

    return _add
