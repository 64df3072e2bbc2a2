"""TaskManager unit tests: in-memory task store, mocked side-effect services."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from app.application.dtos.task import (
    CreateTaskInput,
    RecurringProcessResult,
    TaskResult,
    UpdateTaskPatch,
)
from app.application.dtos.user import UserResult
from app.application.use_cases.tasks import TaskManager
from app.application.use_cases.tasks.task_manager import (
    MAX_ERROR_TASK_IDS,
    UNKNOWN_ACTOR_NAME,
)
from app.domain.enums import RecurringPattern, TaskPriority, TaskStatus, UserRole
from app.domain.exceptions import TaskVersionConflictException, ValidationException

ALICE, BOB, CAROL = 1, 2, 3
NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


class InMemoryTaskRepo:
    """Enough of ITaskRepository for the manager: create, get, update (CAS), delete."""

    def __init__(self) -> None:
        self.tasks: dict[int, TaskResult] = {}
        self._next_id = 1

    async def create(self, data: CreateTaskInput) -> TaskResult:
        task = TaskResult(
            id=self._next_id,
            title=data.title,
            description=data.description,
            status=data.status,
            priority=data.priority,
            due_date=data.due_date,
            created_at=NOW,
            created_by_id=data.created_by_id,
            assigned_to_id=data.assigned_to_id,
            is_recurring=data.is_recurring,
            recurring_pattern=data.recurring_pattern,
            recurring_end_date=data.recurring_end_date,
            parent_task_id=data.parent_task_id,
        )
        self.tasks[task.id] = task
        self._next_id += 1
        return task

    async def get_by_id(self, task_id: int) -> TaskResult | None:
        return self.tasks.get(task_id)

    async def update(
        self, task_id: int, values: dict[str, Any], expected_version: int | None = None
    ) -> TaskResult | None:
        current = self.tasks.get(task_id)
        if current is None:
            return None
        if expected_version is not None and expected_version != current.version:
            raise TaskVersionConflictException(task_id, expected_version, current.version)
        updated = replace(current, **values, version=current.version + 1, updated_at=NOW)
        self.tasks[task_id] = updated
        return updated

    async def delete(self, task_id: int) -> bool:
        return self.tasks.pop(task_id, None) is not None

    async def list_recurring(self) -> list[TaskResult]:
        return [t for t in self.tasks.values() if t.generates_instances]


def _user(user_id: int, name: str) -> UserResult:
    return UserResult(
        id=user_id,
        username=name.lower(),
        name=name,
        email=f"{name.lower()}@example.com",
        role=UserRole.USER,
        is_active=True,
    )


USERS = {ALICE: _user(ALICE, "Alice"), BOB: _user(BOB, "Bob"), CAROL: _user(CAROL, "Carol")}


@pytest.fixture
def task_repo() -> InMemoryTaskRepo:
    return InMemoryTaskRepo()


@pytest.fixture
def user_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.exists = AsyncMock(side_effect=lambda ids: {i for i in ids if i in USERS})
    repo.get_by_id = AsyncMock(side_effect=lambda uid: USERS.get(uid))
    return repo


@pytest.fixture
def generator() -> AsyncMock:
    gen = AsyncMock()
    gen.generate_instances = AsyncMock(return_value=[])
    return gen


@pytest.fixture
def audit_logger() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def notifier() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def manager(task_repo, user_repo, generator, audit_logger, notifier) -> TaskManager:
    return TaskManager(
        task_repo=task_repo,
        user_repo=user_repo,
        generator=generator,
        audit_logger=audit_logger,
        notifier=notifier,
    )


def _audit_actions(audit_logger: AsyncMock) -> list[str]:
    return [name for name, _, _ in audit_logger.method_calls]


async def _create(manager: TaskManager, **overrides: Any) -> TaskResult:
    data = {"title": "Write report", "created_by_id": ALICE, **overrides}
    task = await manager.create_task(CreateTaskInput(**data), acting_user_id=data["created_by_id"])
    return task


# ---- create ----


async def test_create_task_audits_and_notifies_assignee(
    manager: TaskManager, audit_logger: AsyncMock, notifier: AsyncMock
) -> None:
    """Creating an assigned task audits CREATED and notifies the assignee with the actor's name."""
    task = await _create(manager, assigned_to_id=BOB)

    assert task.status == TaskStatus.NOT_STARTED
    assert task.priority == TaskPriority.MEDIUM
    assert task.version == 1
    audit_logger.log_created.assert_awaited_once_with(task, ALICE)
    notifier.notify_assigned.assert_awaited_once_with(task, BOB, "Alice")


async def test_create_task_self_assigned_does_not_notify(
    manager: TaskManager, notifier: AsyncMock
) -> None:
    """Users are never notified about their own actions."""
    await _create(manager, assigned_to_id=ALICE)
    notifier.notify_assigned.assert_not_awaited()


async def test_create_task_strips_title(manager: TaskManager) -> None:
    task = await _create(manager, title="  Trim me  ")
    assert task.title == "Trim me"


@pytest.mark.parametrize("title", ["", "   "])
async def test_create_task_empty_title_raises(
    manager: TaskManager, task_repo: InMemoryTaskRepo, audit_logger: AsyncMock, title: str
) -> None:
    """Blank titles are rejected before anything is written."""
    with pytest.raises(ValidationException) as exc_info:
        await _create(manager, title=title)
    assert exc_info.value.details == {"field": "title"}
    assert task_repo.tasks == {}
    audit_logger.log_created.assert_not_awaited()


async def test_create_task_invalid_status_raises(manager: TaskManager) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await _create(manager, status="archived")
    assert exc_info.value.details == {"field": "status"}


async def test_create_task_accepts_enum_values_as_strings(manager: TaskManager) -> None:
    task = await _create(manager, status="in_progress", priority="high")
    assert task.status == TaskStatus.IN_PROGRESS
    assert task.priority == TaskPriority.HIGH


async def test_create_task_unknown_assignee_raises(
    manager: TaskManager, task_repo: InMemoryTaskRepo
) -> None:
    """An assignee id with no user behind it is a validation error."""
    with pytest.raises(ValidationException) as exc_info:
        await _create(manager, assigned_to_id=999)
    assert exc_info.value.details == {"field": "assigned_to_id"}
    assert task_repo.tasks == {}


async def test_create_recurring_task_generates_instances(
    manager: TaskManager, generator: AsyncMock
) -> None:
    task = await _create(
        manager,
        is_recurring=True,
        recurring_pattern=RecurringPattern.DAILY,
        due_date=NOW,
    )
    generator.generate_instances.assert_awaited_once_with(task)


async def test_create_recurring_flag_without_pattern_does_not_generate(
    manager: TaskManager, generator: AsyncMock
) -> None:
    await _create(manager, is_recurring=True, due_date=NOW)
    generator.generate_instances.assert_not_awaited()


async def test_create_instance_cannot_be_recurring(manager: TaskManager) -> None:
    parent = await _create(manager)
    with pytest.raises(ValidationException):
        await _create(
            manager,
            parent_task_id=parent.id,
            is_recurring=True,
            recurring_pattern=RecurringPattern.WEEKLY,
        )


# ---- update ----


async def test_update_missing_task_returns_none(manager: TaskManager) -> None:
    assert await manager.update_task(42, UpdateTaskPatch(title="x"), ALICE) is None


async def test_update_bumps_version_and_audits_changes(
    manager: TaskManager, audit_logger: AsyncMock
) -> None:
    """A plain field change bumps the version and writes one UPDATED entry with from/to."""
    task = await _create(manager)
    audit_logger.reset_mock()

    updated = await manager.update_task(
        task.id, UpdateTaskPatch(title="Write final report", priority="high"), ALICE
    )

    assert updated.version == 2
    assert updated.title == "Write final report"
    assert _audit_actions(audit_logger) == ["log_updated"]
    _, _, changes = audit_logger.log_updated.await_args.args
    assert set(changes) == {"title", "priority"}
    assert changes["title"].old == "Write report"
    assert changes["title"].new == "Write final report"


async def test_update_without_changes_returns_existing_without_side_effects(
    manager: TaskManager, audit_logger: AsyncMock, notifier: AsyncMock
) -> None:
    """A patch equal to the stored values is a no-op: same version, no audit, no notification."""
    task = await _create(manager, assigned_to_id=BOB)
    audit_logger.reset_mock()
    notifier.reset_mock()

    result = await manager.update_task(task.id, UpdateTaskPatch(title="Write report"), ALICE)

    assert result == task
    assert audit_logger.method_calls == []
    assert notifier.method_calls == []


async def test_update_stale_expected_version_raises(
    manager: TaskManager, task_repo: InMemoryTaskRepo
) -> None:
    task = await _create(manager)
    await manager.update_task(task.id, UpdateTaskPatch(title="v2"), ALICE)

    with pytest.raises(TaskVersionConflictException) as exc_info:
        await manager.update_task(
            task.id, UpdateTaskPatch(title="v3", expected_version=1), ALICE
        )
    assert exc_info.value.details["actual_version"] == 2
    assert task_repo.tasks[task.id].title == "v2"


async def test_update_matching_expected_version_succeeds(manager: TaskManager) -> None:
    task = await _create(manager)
    updated = await manager.update_task(
        task.id, UpdateTaskPatch(title="v2", expected_version=1), ALICE
    )
    assert updated.version == 2


async def test_create_audits_before_notifying_and_update_notifies_first(
    manager: TaskManager, audit_logger: AsyncMock, notifier: AsyncMock
) -> None:
    calls = Mock()
    calls.attach_mock(audit_logger, "audit")
    calls.attach_mock(notifier, "notify")

    task = await _create(manager, assigned_to_id=BOB)
    await manager.update_task(task.id, UpdateTaskPatch(title="Rewrite report"), ALICE)

    assert [name for name, _, _ in calls.mock_calls] == [
        "audit.log_created",
        "notify.notify_assigned",
        "notify.notify_updated",
        "audit.log_updated",
    ]


async def test_update_completion_audit_order_and_creator_notified(
    manager: TaskManager, audit_logger: AsyncMock, notifier: AsyncMock
) -> None:
    """Assignee completing a task: STATUS_CHANGED, COMPLETED, UPDATED; creator told."""
    task = await _create(manager, assigned_to_id=BOB)
    audit_logger.reset_mock()
    notifier.reset_mock()

    updated = await manager.update_task(
        task.id, UpdateTaskPatch(status=TaskStatus.COMPLETED), BOB
    )

    assert _audit_actions(audit_logger) == [
        "log_status_changed",
        "log_completed",
        "log_updated",
    ]
    audit_logger.log_status_changed.assert_awaited_once_with(
        updated, BOB, "not_started", "completed"
    )
    notifier.notify_completed.assert_awaited_once_with(updated, ALICE, "Bob")
    # The assignee is the actor, so no update notification.
    notifier.notify_updated.assert_not_awaited()


async def test_update_by_creator_notifies_assignee(
    manager: TaskManager, notifier: AsyncMock
) -> None:
    task = await _create(manager, assigned_to_id=BOB)
    notifier.reset_mock()

    updated = await manager.update_task(task.id, UpdateTaskPatch(description="More"), ALICE)

    notifier.notify_updated.assert_awaited_once_with(updated, BOB, "Alice")
    notifier.notify_completed.assert_not_awaited()


async def test_creator_completing_own_task_is_not_notified(
    manager: TaskManager, notifier: AsyncMock
) -> None:
    task = await _create(manager)
    notifier.reset_mock()
    await manager.update_task(task.id, UpdateTaskPatch(status="completed"), ALICE)
    assert notifier.method_calls == []


async def test_reassignment_notifies_only_new_assignee(
    manager: TaskManager, audit_logger: AsyncMock, notifier: AsyncMock
) -> None:
    """Reassigning sends one ASSIGNED notification to the new assignee; audit ASSIGNED then UPDATED."""
    task = await _create(manager, assigned_to_id=BOB)
    audit_logger.reset_mock()
    notifier.reset_mock()

    updated = await manager.update_task(task.id, UpdateTaskPatch(assigned_to_id=CAROL), ALICE)

    notifier.notify_assigned.assert_awaited_once_with(updated, CAROL, "Alice")
    notifier.notify_updated.assert_not_awaited()
    assert _audit_actions(audit_logger) == ["log_assigned", "log_updated"]
    audit_logger.log_assigned.assert_awaited_once_with(updated, ALICE, BOB)


async def test_unassign_notifies_nobody(manager: TaskManager, notifier: AsyncMock) -> None:
    task = await _create(manager, assigned_to_id=BOB)
    notifier.reset_mock()
    updated = await manager.update_task(task.id, UpdateTaskPatch(assigned_to_id=None), ALICE)
    assert updated.assigned_to_id is None
    assert notifier.method_calls == []


async def test_reassign_to_unknown_user_raises(manager: TaskManager) -> None:
    task = await _create(manager)
    with pytest.raises(ValidationException):
        await manager.update_task(task.id, UpdateTaskPatch(assigned_to_id=999), ALICE)


async def test_update_empty_title_raises(manager: TaskManager) -> None:
    task = await _create(manager)
    with pytest.raises(ValidationException):
        await manager.update_task(task.id, UpdateTaskPatch(title="  "), ALICE)


async def test_update_unknown_actor_uses_placeholder_name(
    manager: TaskManager, notifier: AsyncMock
) -> None:
    """An actor missing from the directory is named 'Someone' in notifications."""
    task = await _create(manager, assigned_to_id=BOB)
    notifier.reset_mock()
    updated = await manager.update_task(task.id, UpdateTaskPatch(description="x"), 77)
    notifier.notify_updated.assert_awaited_once_with(updated, BOB, UNKNOWN_ACTOR_NAME)


async def test_update_making_task_recurring_generates_instances(
    manager: TaskManager, generator: AsyncMock
) -> None:
    task = await _create(manager, due_date=NOW)
    updated = await manager.update_task(
        task.id,
        UpdateTaskPatch(is_recurring=True, recurring_pattern=RecurringPattern.WEEKLY),
        ALICE,
    )
    generator.generate_instances.assert_awaited_once_with(updated)


async def test_update_already_recurring_does_not_regenerate(
    manager: TaskManager, generator: AsyncMock
) -> None:
    task = await _create(
        manager, due_date=NOW, is_recurring=True, recurring_pattern=RecurringPattern.DAILY
    )
    generator.reset_mock()
    await manager.update_task(task.id, UpdateTaskPatch(title="Renamed"), ALICE)
    generator.generate_instances.assert_not_awaited()


async def test_recurring_task_first_given_due_date_generates_instances(
    manager: TaskManager, generator: AsyncMock
) -> None:
    task = await _create(manager, is_recurring=True, recurring_pattern=RecurringPattern.DAILY)
    generator.generate_instances.assert_not_awaited()

    updated = await manager.update_task(task.id, UpdateTaskPatch(due_date=NOW), ALICE)

    generator.generate_instances.assert_awaited_once_with(updated)


async def test_moving_due_date_of_recurring_task_does_not_regenerate(
    manager: TaskManager, generator: AsyncMock
) -> None:
    task = await _create(
        manager, due_date=NOW, is_recurring=True, recurring_pattern=RecurringPattern.DAILY
    )
    generator.reset_mock()
    await manager.update_task(
        task.id, UpdateTaskPatch(due_date=NOW + timedelta(days=2)), ALICE
    )
    generator.generate_instances.assert_not_awaited()


async def test_making_task_recurring_without_due_date_does_not_generate(
    manager: TaskManager, generator: AsyncMock
) -> None:
    task = await _create(manager)
    await manager.update_task(
        task.id,
        UpdateTaskPatch(is_recurring=True, recurring_pattern=RecurringPattern.WEEKLY),
        ALICE,
    )
    generator.generate_instances.assert_not_awaited()


async def test_failed_actor_lookup_still_notifies_and_keeps_update(
    manager: TaskManager, user_repo: AsyncMock, notifier: AsyncMock
) -> None:
    task = await _create(manager, assigned_to_id=BOB)
    notifier.reset_mock()
    user_repo.get_by_id = AsyncMock(side_effect=RuntimeError("directory down"))

    updated = await manager.update_task(task.id, UpdateTaskPatch(description="x"), ALICE)

    assert updated.description == "x"
    notifier.notify_updated.assert_awaited_once_with(updated, BOB, UNKNOWN_ACTOR_NAME)


async def test_update_instance_to_recurring_raises(manager: TaskManager) -> None:
    parent = await _create(manager)
    child = await _create(manager, parent_task_id=parent.id)
    with pytest.raises(ValidationException):
        await manager.update_task(child.id, UpdateTaskPatch(is_recurring=True), ALICE)


# ---- delete ----


async def test_delete_audits_before_removing(
    manager: TaskManager, task_repo: InMemoryTaskRepo, audit_logger: AsyncMock
) -> None:
    task = await _create(manager)
    assert await manager.delete_task(task.id, ALICE) is True
    audit_logger.log_deleted.assert_awaited_once_with(task, ALICE)
    assert task.id not in task_repo.tasks


async def test_delete_missing_task_writes_no_audit(
    manager: TaskManager, audit_logger: AsyncMock
) -> None:
    assert await manager.delete_task(404, ALICE) is False
    audit_logger.log_deleted.assert_not_awaited()


# ---- process_recurring_tasks ----


async def test_process_recurring_isolates_failures(
    manager: TaskManager, generator: AsyncMock
) -> None:
    """One failing parent is counted; the other parents still generate."""
    recurring = {"is_recurring": True, "recurring_pattern": RecurringPattern.DAILY, "due_date": NOW}
    first = await _create(manager, **recurring)
    second = await _create(manager, **recurring)
    third = await _create(manager, **recurring)

    async def _generate(parent: TaskResult) -> list[TaskResult]:
        if parent.id == second.id:
            raise RuntimeError("store unavailable")
        return [parent, parent]

    generator.generate_instances = AsyncMock(side_effect=_generate)

    result = await manager.process_recurring_tasks()

    assert result == RecurringProcessResult(
        parents_processed=3,
        instances_created=4,
        error_count=1,
        error_task_ids=[second.id],
    )
    assert generator.generate_instances.await_count == 3
    assert {c.args[0].id for c in generator.generate_instances.await_args_list} == {
        first.id,
        second.id,
        third.id,
    }


async def test_process_recurring_caps_error_ids(
    manager: TaskManager, generator: AsyncMock
) -> None:
    for _ in range(MAX_ERROR_TASK_IDS + 5):
        await _create(
            manager, is_recurring=True, recurring_pattern=RecurringPattern.DAILY, due_date=NOW
        )
    generator.generate_instances = AsyncMock(side_effect=RuntimeError("boom"))

    result = await manager.process_recurring_tasks()

    assert result.error_count == MAX_ERROR_TASK_IDS + 5
    assert len(result.error_task_ids) == MAX_ERROR_TASK_IDS


async def test_process_recurring_propagates_programming_errors(
    manager: TaskManager, generator: AsyncMock
) -> None:
    await _create(
        manager, is_recurring=True, recurring_pattern=RecurringPattern.DAILY, due_date=NOW
    )
    generator.generate_instances = AsyncMock(side_effect=TypeError("bad call"))
    with pytest.raises(TypeError):
        await manager.process_recurring_tasks()
