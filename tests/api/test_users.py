"""User endpoints: directory, profile, notification preferences, admin account management."""

from unittest.mock import AsyncMock, MagicMock

from httpx import AsyncClient

from app.domain.enums import UserRole
from tests.conftest import TEST_PASSWORD


async def test_me(client: AsyncClient, create_user, headers_for) -> None:
    user = await create_user("alice", email="alice@example.com")
    response = await client.get("/api/v1/users/me", headers=headers_for(user))
    assert response.status_code == 200
    assert response.json() == {
        "id": user.id,
        "username": "alice",
        "name": "Alice",
        "email": "alice@example.com",
        "role": "user",
        "isActive": True,
    }


async def test_list_users_ordered_by_name(client: AsyncClient, create_user, headers_for) -> None:
    zed = await create_user("zed", name="Zed")
    await create_user("amy", name="Amy")
    response = await client.get("/api/v1/users", headers=headers_for(zed))
    assert [u["username"] for u in response.json()] == ["amy", "zed"]


async def test_preferences_default_to_all_on(client: AsyncClient, create_user, headers_for) -> None:
    user = await create_user("alice")
    response = await client.get(
        "/api/v1/users/me/notification-preferences", headers=headers_for(user)
    )
    assert response.json() == {
        "inApp": True,
        "email": True,
        "taskAssignment": True,
        "taskStatusUpdate": True,
        "taskCompletion": True,
    }


async def test_put_preferences_replaces_whole_set(
    client: AsyncClient, create_user, headers_for
) -> None:
    """PUT stores exactly what was sent; omitted flags reset to true."""
    user = await create_user("alice")
    url = "/api/v1/users/me/notification-preferences"

    first = await client.put(url, json={"email": False, "inApp": False}, headers=headers_for(user))
    assert first.status_code == 200
    assert first.json()["email"] is False

    second = await client.put(url, json={"taskCompletion": False}, headers=headers_for(user))
    body = second.json()
    assert body["email"] is True
    assert body["inApp"] is True
    assert body["taskCompletion"] is False

    stored = await client.get(url, headers=headers_for(user))
    assert stored.json() == body


async def test_in_app_off_suppresses_push(
    client: AsyncClient, create_user, headers_for, ws_manager
) -> None:
    """A connected user who turned in-app notifications off is not pushed to."""
    alice = await create_user("alice")
    bob = await create_user("bob")
    await client.put(
        "/api/v1/users/me/notification-preferences",
        json={"inApp": False},
        headers=headers_for(bob),
    )
    socket = MagicMock()
    socket.accept = AsyncMock()
    socket.send_json = AsyncMock()
    await ws_manager.connect(socket, bob.id)

    response = await client.post(
        "/api/v1/tasks", json={"title": "Quiet", "assignedToId": bob.id}, headers=headers_for(alice)
    )

    assert response.status_code == 201
    socket.send_json.assert_not_awaited()


async def test_profile_update_changes_name_and_email(
    client: AsyncClient, create_user, headers_for
) -> None:
    user = await create_user("alice", email="alice@example.com")

    response = await client.patch(
        "/api/v1/users/me",
        json={"name": "Alice Liddell", "email": "liddell@example.com"},
        headers=headers_for(user),
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Alice Liddell"
    assert response.json()["email"] == "liddell@example.com"


async def test_profile_email_taken_returns_400(
    client: AsyncClient, create_user, headers_for
) -> None:
    alice = await create_user("alice", email="alice@example.com")
    await create_user("bob", email="bob@example.com")

    response = await client.patch(
        "/api/v1/users/me", json={"email": "bob@example.com"}, headers=headers_for(alice)
    )

    assert response.status_code == 400
    assert response.json()["details"] == {"field": "email"}
    me = await client.get("/api/v1/users/me", headers=headers_for(alice))
    assert me.json()["email"] == "alice@example.com"


async def test_account_management_is_admin_only(
    client: AsyncClient, create_user, headers_for
) -> None:
    alice = await create_user("alice")
    bob = await create_user("bob")
    headers = headers_for(alice)

    assert (await client.get(f"/api/v1/users/{bob.id}", headers=headers)).status_code == 403
    assert (
        await client.put(f"/api/v1/users/{bob.id}", json={"name": "B"}, headers=headers)
    ).status_code == 403
    assert (await client.delete(f"/api/v1/users/{bob.id}", headers=headers)).status_code == 403


async def test_admin_updates_user_and_change_is_audited(
    client: AsyncClient, create_user, headers_for
) -> None:
    admin = await create_user("root", role=UserRole.ADMIN)
    alice = await create_user("alice")

    response = await client.put(
        f"/api/v1/users/{alice.id}", json={"role": "manager"}, headers=headers_for(admin)
    )

    assert response.status_code == 200
    assert response.json()["role"] == "manager"
    logs = await client.get(
        f"/api/v1/audit-logs?entityType=user&entityId={alice.id}", headers=headers_for(admin)
    )
    (entry,) = logs.json()
    assert entry["action"] == "updated"
    assert entry["userId"] == admin.id
    assert entry["details"] == {
        "username": "alice",
        "changes": {"role": {"from": "user", "to": "manager"}},
    }


async def test_deactivated_user_is_locked_out(
    client: AsyncClient, create_user, headers_for
) -> None:
    admin = await create_user("root", role=UserRole.ADMIN)
    alice = await create_user("alice")

    response = await client.patch(
        f"/api/v1/users/{alice.id}/status", json={"isActive": False}, headers=headers_for(admin)
    )

    assert response.status_code == 200
    assert response.json()["isActive"] is False
    login = await client.post(
        "/api/v1/auth/login", json={"username": "alice", "password": TEST_PASSWORD}
    )
    assert login.status_code == 401
    assert (await client.get("/api/v1/users/me", headers=headers_for(alice))).status_code == 401


async def test_admin_cannot_deactivate_or_delete_self(
    client: AsyncClient, create_user, headers_for
) -> None:
    admin = await create_user("root", role=UserRole.ADMIN)
    headers = headers_for(admin)

    status = await client.patch(
        f"/api/v1/users/{admin.id}/status", json={"isActive": False}, headers=headers
    )
    delete = await client.delete(f"/api/v1/users/{admin.id}", headers=headers)

    assert status.status_code == 400
    assert delete.status_code == 400
    assert (await client.get("/api/v1/users/me", headers=headers)).status_code == 200


async def test_delete_user_without_tasks(client: AsyncClient, create_user, headers_for) -> None:
    admin = await create_user("root", role=UserRole.ADMIN)
    alice = await create_user("alice")
    headers = headers_for(admin)

    assert (await client.delete(f"/api/v1/users/{alice.id}", headers=headers)).status_code == 204
    assert (await client.get(f"/api/v1/users/{alice.id}", headers=headers)).status_code == 404
    assert (await client.delete(f"/api/v1/users/{alice.id}", headers=headers)).status_code == 404
    logs = await client.get("/api/v1/audit-logs?entityType=user", headers=headers)
    assert [(e["action"], e["entityId"]) for e in logs.json()] == [("deleted", alice.id)]


async def test_delete_user_with_tasks_returns_400(
    client: AsyncClient, create_user, headers_for
) -> None:
    admin = await create_user("root", role=UserRole.ADMIN)
    alice = await create_user("alice")
    created = await client.post(
        "/api/v1/tasks", json={"title": "Keep me"}, headers=headers_for(alice)
    )
    assert created.status_code == 201

    response = await client.delete(f"/api/v1/users/{alice.id}", headers=headers_for(admin))

    assert response.status_code == 400
    assert (await client.get(f"/api/v1/users/{alice.id}", headers=headers_for(admin))).status_code == 200
