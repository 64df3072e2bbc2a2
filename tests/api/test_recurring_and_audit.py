"""Recurring-task processing and audit log endpoints (role-gated)."""

import pytest
from httpx import AsyncClient

from app.domain.enums import UserRole


@pytest.fixture
async def admin(create_user):
    return await create_user("root", role=UserRole.ADMIN)


@pytest.fixture
async def manager(create_user):
    return await create_user("boss", role=UserRole.MANAGER)


@pytest.fixture
async def member(create_user):
    return await create_user("alice")


async def _create_weekly(client: AsyncClient, headers: dict) -> dict:
    response = await client.post(
        "/api/v1/tasks",
        json={
            "title": "Weekly report",
            "dueDate": "2030-03-04T10:00:00Z",
            "isRecurring": True,
            "recurringPattern": "weekly",
            "recurringEndDate": "2030-03-18T10:00:00Z",
        },
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


async def test_list_recurring_requires_admin_or_manager(
    client: AsyncClient, manager, member, headers_for
) -> None:
    parent = await _create_weekly(client, headers_for(member))

    denied = await client.get("/api/v1/recurring-tasks", headers=headers_for(member))
    assert denied.status_code == 403

    response = await client.get("/api/v1/recurring-tasks", headers=headers_for(manager))
    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == [parent["id"]]


async def test_list_instances_of_parent(client: AsyncClient, member, headers_for) -> None:
    parent = await _create_weekly(client, headers_for(member))

    response = await client.get(
        f"/api/v1/recurring-tasks/{parent['id']}/instances", headers=headers_for(member)
    )

    assert response.status_code == 200
    instances = response.json()
    assert [t["dueDate"][:10] for t in instances] == ["2030-03-11", "2030-03-18"]
    assert {t["parentTaskId"] for t in instances} == {parent["id"]}
    assert not any(t["isRecurring"] for t in instances)


async def test_list_instances_of_missing_task_returns_404(
    client: AsyncClient, member, headers_for
) -> None:
    response = await client.get("/api/v1/recurring-tasks/999/instances", headers=headers_for(member))
    assert response.status_code == 404


async def test_process_is_admin_only(client: AsyncClient, manager, headers_for) -> None:
    response = await client.post("/api/v1/recurring-tasks/process", headers=headers_for(manager))
    assert response.status_code == 403


async def test_process_generates_again_without_dedup(
    client: AsyncClient, admin, member, headers_for
) -> None:
    """Creation generated two weekly instances; a batch run generates them again."""
    await _create_weekly(client, headers_for(member))

    response = await client.post("/api/v1/recurring-tasks/process", headers=headers_for(admin))

    assert response.status_code == 200
    assert response.json() == {
        "parentsProcessed": 1,
        "instancesCreated": 2,
        "errorCount": 0,
        "errorTaskIds": [],
    }
    tasks = await client.get("/api/v1/tasks", headers=headers_for(admin))
    assert len(tasks.json()) == 5


async def test_audit_log_list_is_admin_only(
    client: AsyncClient, admin, member, headers_for
) -> None:
    await client.post("/api/v1/tasks", json={"title": "A"}, headers=headers_for(member))

    assert (await client.get("/api/v1/audit-logs", headers=headers_for(member))).status_code == 403

    response = await client.get(
        f"/api/v1/audit-logs?userId={member.id}", headers=headers_for(admin)
    )
    assert response.status_code == 200
    (entry,) = response.json()
    assert entry["entityType"] == "task"
    assert entry["action"] == "created"
    assert entry["details"] == {"taskTitle": "A", "isRecurring": False, "assignedToId": None}


async def test_my_audit_log(client: AsyncClient, admin, member, headers_for) -> None:
    await client.post("/api/v1/tasks", json={"title": "Mine"}, headers=headers_for(member))
    await client.post("/api/v1/tasks", json={"title": "Theirs"}, headers=headers_for(admin))

    response = await client.get("/api/v1/audit-logs/me", headers=headers_for(member))

    assert [e["details"]["taskTitle"] for e in response.json()] == ["Mine"]


async def test_task_audit_log_requires_modify_access(
    client: AsyncClient, admin, member, create_user, headers_for
) -> None:
    outsider = await create_user("eve")
    task = (
        await client.post("/api/v1/tasks", json={"title": "Private"}, headers=headers_for(member))
    ).json()
    url = f"/api/v1/tasks/{task['id']}/audit-logs"

    assert (await client.get(url, headers=headers_for(outsider))).status_code == 403
    assert (await client.get(url, headers=headers_for(admin))).status_code == 200
