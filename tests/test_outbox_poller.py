from unittest.mock import AsyncMock, patch

import pytest

from app.consumers.outbox_poller import HANDLERS, poll_outbox_for_new_events
from app.events.outbox_utility import INVENTORY_UPDATED, LOW_STOCK_ALERT
from app.models.outbox import OutboxEvent
from app.services.transaction_service import add_stock, consume_stock


@pytest.mark.asyncio
async def test_threshold_crossing_is_written_and_published(component, location_a):
    await add_stock(component.id, location_a.id, 8)
    await consume_stock(component.id, location_a.id, 4)

    events = await OutboxEvent.all().order_by("created_at")
    assert [e.event_type for e in events].count(INVENTORY_UPDATED) == 2
    assert [e.event_type for e in events].count(LOW_STOCK_ALERT) == 1

    assert await poll_outbox_for_new_events() == 3
    assert await OutboxEvent.filter(published=False).count() == 0
    # Nothing left to deliver on the next round
    assert await poll_outbox_for_new_events() == 0


@pytest.mark.asyncio
async def test_failing_handler_is_retried_later(component, location_a):
    await add_stock(component.id, location_a.id, 20)

    failing = AsyncMock(side_effect=RuntimeError("downstream unavailable"))
    with patch.dict(HANDLERS, {INVENTORY_UPDATED: failing}):
        assert await poll_outbox_for_new_events() == 0

    event = await OutboxEvent.get(event_type=INVENTORY_UPDATED)
    assert event.published is False
    assert event.attempts == 1

    assert await poll_outbox_for_new_events() == 1


@pytest.mark.asyncio
async def test_event_past_max_attempts_is_left_alone(component, location_a):
    await add_stock(component.id, location_a.id, 20)
    await OutboxEvent.all().update(attempts=5)

    with patch("app.consumers.outbox_poller.MAX_ATTEMPTS", 5):
        assert await poll_outbox_for_new_events() == 0
