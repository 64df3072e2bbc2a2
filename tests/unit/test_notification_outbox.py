"""Notification outbox and the write dependency that flushes it after commit."""

from unittest.mock import AsyncMock

import pytest

from app.api.v1.dependencies import get_notification_outbox
from app.application.services import NotificationOutbox


async def test_flush_runs_queued_deliveries_once_in_order() -> None:
    calls: list[str] = []
    outbox = NotificationOutbox()
    outbox.add(AsyncMock(side_effect=lambda: calls.append("first")))
    outbox.add(AsyncMock(side_effect=lambda: calls.append("second")))

    assert await outbox.flush() == 2
    assert await outbox.flush() == 0
    assert calls == ["first", "second"]


async def test_dependency_flushes_when_request_completes() -> None:
    dependency = get_notification_outbox()
    outbox = await anext(dependency)
    delivery = AsyncMock()
    outbox.add(delivery)

    with pytest.raises(StopAsyncIteration):
        await anext(dependency)

    delivery.assert_awaited_once()


async def test_dependency_drops_deliveries_when_request_fails() -> None:
    """A write that raises (including a failed commit) sends nothing."""
    dependency = get_notification_outbox()
    outbox = await anext(dependency)
    delivery = AsyncMock()
    outbox.add(delivery)

    with pytest.raises(RuntimeError, match="commit failed"):
        await dependency.athrow(RuntimeError("commit failed"))

    delivery.assert_not_awaited()
