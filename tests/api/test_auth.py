"""Auth endpoints: register, login, and bearer token handling."""

from httpx import AsyncClient
from jose import jwt

from app.core.config import get_settings
from app.domain.enums import UserRole
from tests.conftest import TEST_PASSWORD


async def test_login_missing_body_returns_422(client: AsyncClient) -> None:
    """POST /api/v1/auth/login with no body returns 422 in the error envelope."""
    response = await client.post("/api/v1/auth/login", json={})
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_login_returns_token_with_user_id_subject(client: AsyncClient, create_user) -> None:
    user = await create_user("alice", role=UserRole.MANAGER)

    response = await client.post(
        "/api/v1/auth/login", json={"username": "alice", "password": TEST_PASSWORD}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["tokenType"] == "bearer"
    settings = get_settings()
    assert data["expiresIn"] == settings.access_token_expire_minutes * 60
    claims = jwt.decode(
        data["accessToken"],
        settings.secret_key.get_secret_value(),
        algorithms=[settings.algorithm],
    )
    assert claims["sub"] == str(user.id)
    assert claims["role"] == "manager"


async def test_login_wrong_password_returns_401(client: AsyncClient, create_user) -> None:
    await create_user("alice")
    response = await client.post(
        "/api/v1/auth/login", json={"username": "alice", "password": "not-it"}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "HTTP_ERROR", "message": "Invalid credentials"}


async def test_login_unknown_user_returns_401(client: AsyncClient) -> None:
    """Unknown usernames get the same response as a wrong password."""
    response = await client.post(
        "/api/v1/auth/login", json={"username": "ghost", "password": TEST_PASSWORD}
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


async def test_login_inactive_user_returns_401(client: AsyncClient, create_user) -> None:
    await create_user("alice", is_active=False)
    response = await client.post(
        "/api/v1/auth/login", json={"username": "alice", "password": TEST_PASSWORD}
    )
    assert response.status_code == 401


async def test_register_then_login(client: AsyncClient) -> None:
    """Registered users get the user role and can log in immediately."""
    response = await client.post(
        "/api/v1/auth/register",
        json={
            "username": "newbie",
            "name": "New Person",
            "email": "newbie@example.com",
            "password": "long-enough-pw",
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["username"] == "newbie"
    assert body["role"] == "user"
    assert body["isActive"] is True
    assert "password" not in body and "hashedPassword" not in body

    login = await client.post(
        "/api/v1/auth/login", json={"username": "newbie", "password": "long-enough-pw"}
    )
    assert login.status_code == 200


async def test_register_duplicate_username_returns_409(client: AsyncClient, create_user) -> None:
    await create_user("alice")
    response = await client.post(
        "/api/v1/auth/register",
        json={"username": "alice", "name": "Alice Two", "password": "long-enough-pw"},
    )
    assert response.status_code == 409
    assert response.json()["error"] == "USER_ALREADY_EXISTS"


async def test_register_short_password_returns_422(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/auth/register",
        json={"username": "newbie", "name": "New", "password": "short"},
    )
    assert response.status_code == 422


async def test_protected_route_without_token_returns_401(client: AsyncClient) -> None:
    response = await client.get("/api/v1/tasks")
    assert response.status_code == 401
    assert response.headers.get("www-authenticate") == "Bearer"


async def test_protected_route_with_garbage_token_returns_401(client: AsyncClient) -> None:
    response = await client.get(
        "/api/v1/tasks", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401


async def test_token_of_deactivated_user_is_rejected(
    client: AsyncClient, create_user, headers_for
) -> None:
    """Tokens are re-checked against the directory on every request."""
    user = await create_user("alice", is_active=False)
    response = await client.get("/api/v1/users/me", headers=headers_for(user))
    assert response.status_code == 401


async def test_request_id_header_is_echoed(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
    assert response.headers.get("X-Request-ID") == "req-123"
