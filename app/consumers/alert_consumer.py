import logging
from typing import Any, Dict
from uuid import UUID

from app.models.inventory import InventoryItem

log = logging.getLogger("alert_consumer")


async def handle_low_stock_alert(event_payload: Dict[str, Any], event_id: UUID):
    """
    Consumer logic for 'inventory.low_stock_alert.v1'.
    Delivers the alert unless the row has been restocked since the event was written.
    """
    component_id = event_payload.get("componentId")
    location_id = event_payload.get("locationId")

    item = await InventoryItem.get_or_none(component_id=component_id, location_id=location_id).prefetch_related(
        "component", "location"
    )
    if not item:
        log.error(f"Low stock alert {event_id} references a missing inventory row ({component_id}, {location_id}).")
        return

    if not item.is_low_stock:
        log.info(f"Low stock alert {event_id} skipped: component {component_id} was restocked to {item.quantity}.")
        return

    log.warning(
        f"LOW STOCK: {item.component.component_number} at {item.location.name} "
        f"has {item.quantity} remaining (minimum {item.min_stock_level})."
    )


async def handle_inventory_updated(event_payload: Dict[str, Any], event_id: UUID):
    """Consumer logic for 'inventory.updated.v1': hands the change to downstream systems."""
    log.info(
        f"Inventory {event_payload.get('type')} recorded: transaction {event_payload.get('transactionId')}, "
        f"component {event_payload.get('componentId')}, quantity {event_payload.get('quantity')}"
    )
