import asyncio
import logging
from app.models.outbox import OutboxEvent
from app.consumers.alert_consumer import handle_inventory_updated, handle_low_stock_alert
from app.core.db import init_db, close_db
from app.core.config import LOG_LEVEL, POLLING_INTERVAL, MAX_ATTEMPTS, BATCH_SIZE
from app.events.outbox_utility import INVENTORY_UPDATED, LOW_STOCK_ALERT

log = logging.getLogger("outbox_poller")

HANDLERS = {
    LOW_STOCK_ALERT: handle_low_stock_alert,
    INVENTORY_UPDATED: handle_inventory_updated,
}


async def dispatch_event(event: OutboxEvent):
    """
    Routes an OutboxEvent to the correct handler.
    Stands in for a message broker (like Kafka/RabbitMQ) dispatcher.
    """
    log.debug(f"Dispatching {event.event_type} (ID: {event.id.hex[:8]}...)")
    handler = HANDLERS.get(event.event_type)
    if handler is None:
        log.warning(f"No handler found for event type: {event.event_type}")
        return
    await handler(event.payload, event.id)


async def poll_outbox_for_new_events() -> int:
    """
    Queries the Outbox table for unpublished events and attempts to dispatch them.
    Returns how many events were published.
    """
    # Select events that haven't been published and haven't exceeded max attempts
    events = await OutboxEvent.filter(published=False, attempts__lt=MAX_ATTEMPTS).order_by('created_at').limit(BATCH_SIZE)

    published = 0
    for event in events:
        try:
            await dispatch_event(event)

            event.published = True
            await event.save(update_fields=['published'])
            published += 1

        except Exception:
            # Increment attempts on failure; the event is retried on the next poll
            event.attempts += 1
            await event.save(update_fields=['attempts'])
            log.exception(f"Handler failed for event {event.id} (attempt {event.attempts}/{MAX_ATTEMPTS})")
    return published


async def start_outbox_poller():
    """Main loop for the poller service."""
    await init_db()
    log.info("--- Outbox Poller Service Started ---")

    try:
        while True:
            try:
                await poll_outbox_for_new_events()
            except Exception as e:
                log.error(f"Poller encountered a critical DB error: {e}.")

            await asyncio.sleep(POLLING_INTERVAL)
    finally:
        await close_db()

if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    try:
        asyncio.run(start_outbox_poller())
    except KeyboardInterrupt:
        log.info("Poller service stopped.")
