from typing import Dict, Any, Optional
from app.models.outbox import OutboxEvent

LOW_STOCK_ALERT = "inventory.low_stock_alert.v1"
INVENTORY_UPDATED = "inventory.updated.v1"


async def create_outbox_event(
    aggregate_type: str,
    aggregate_id: Optional[int],
    event_type: str,
    payload: Dict[str, Any],
    conn: Any = None
) -> OutboxEvent:
    """
    Creates a new Outbox event record using the provided database connection (transaction).

    CRITICAL: Passing 'conn' ensures the event is created atomically with the stock change.
    """
    return await OutboxEvent.create(
        aggregate_type=aggregate_type,
        aggregate_id=aggregate_id,
        event_type=event_type,
        payload=payload,
        published=False,
        attempts=0,
        using_db=conn
    )
