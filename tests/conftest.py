"""Pytest configuration and fixtures for taskflow.

HTTP and repository tests run against in-memory SQLite (aiosqlite, one shared
connection). The environment is pinned here, before app.main is imported,
because importing it builds the app from settings.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["TELEMETRY_ENABLED"] = "false"
os.environ["MAIL_BACKEND"] = "log"

from collections.abc import AsyncIterator, Awaitable, Callable  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from app.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

import app.infrastructure.persistence.database as database  # noqa: E402
from app.api.websocket import ConnectionManager  # noqa: E402
from app.application.dtos.user import NotificationPreferences, UserResult  # noqa: E402
from app.core.limiter import limiter  # noqa: E402
from app.domain.enums import UserRole  # noqa: E402
from app.infrastructure.persistence.models import User  # noqa: E402
from app.infrastructure.persistence.repositories.user_repo import (  # noqa: E402
    _user_to_result,
)
from app.infrastructure.security.jwt import create_access_token  # noqa: E402
from app.infrastructure.security.password import get_password_hash  # noqa: E402
from app.infrastructure.services import (  # noqa: E402
    EmailTemplateRenderer,
    LogOnlyMailTransport,
)
from app.main import app  # noqa: E402

TEST_PASSWORD = "password123"
# Low cost factor: hashing at the production cost would dominate test time.
_TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD, rounds=4)

CreateUser = Callable[..., Awaitable[UserResult]]


@pytest.fixture(autouse=True)
async def fresh_database() -> AsyncIterator[None]:
    """Fresh in-memory schema for every test; disposing drops the database."""
    await database.dispose_engine()
    await database.create_all()
    yield
    await database.dispose_engine()


@pytest.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    """Session for repository/integration tests. Rolls back after the test."""
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture
def ws_manager() -> ConnectionManager:
    return ConnectionManager()


@pytest.fixture
async def client(ws_manager: ConnectionManager) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI).

    ASGITransport does not run the lifespan, so app.state is wired here.
    """
    limiter.reset()
    app.state.ws_manager = ws_manager
    app.state.mail_transport = LogOnlyMailTransport()
    app.state.email_renderer = EmailTemplateRenderer(
        app_name="taskflow", app_url="http://test"
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def create_user() -> CreateUser:
    """Factory that commits a user and returns it as a UserResult."""

    async def _create(
        username: str,
        role: UserRole = UserRole.USER,
        name: str | None = None,
        email: str | None = None,
        preferences: NotificationPreferences | None = None,
        is_active: bool = True,
    ) -> UserResult:
        async with database.AsyncSessionLocal() as session:
            async with session.begin():
                user = User(
                    username=username,
                    name=name or username.capitalize(),
                    email=email,
                    role=role.value,
                    hashed_password=_TEST_PASSWORD_HASH,
                    is_active=is_active,
                    notification_preferences=(
                        preferences or NotificationPreferences()
                    ).to_dict(),
                )
                session.add(user)
                await session.flush()
                return _user_to_result(user)

    return _create


@pytest.fixture
def headers_for() -> Callable[[UserResult], dict[str, str]]:
    """Bearer headers for a user (token minted directly, no login round-trip)."""

    def _headers(user: UserResult) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers
