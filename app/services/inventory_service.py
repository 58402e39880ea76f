"""
Read side of the inventory core. Nothing in here mutates state; every query
hits the store directly so results always reflect the latest commit.
"""
from collections import defaultdict
from typing import Dict, List, Optional

from tortoise.expressions import F

from app.core.errors import NotFoundError
from app.models.catalog import Component
from app.models.facility import InventoryLocation
from app.models.inventory import InventoryItem, InventoryTransaction, TransactionType


async def get_inventory(location_id: Optional[int] = None) -> List[InventoryItem]:
    """Current stock rows joined with their component and location."""
    query = InventoryItem.all()
    if location_id is not None:
        query = query.filter(location_id=location_id)
    return await query.order_by("component_id", "location_id").prefetch_related("component", "location")


async def get_inventory_item(component_id: int, location_id: int) -> InventoryItem:
    item = await InventoryItem.get_or_none(
        component_id=component_id, location_id=location_id
    ).prefetch_related("component", "location")
    if not item:
        raise NotFoundError(f"No inventory for component {component_id} at location {location_id}.")
    return item


async def get_component_inventory(component_id: int) -> List[InventoryItem]:
    return await InventoryItem.filter(component_id=component_id).order_by("location_id").prefetch_related(
        "component", "location"
    )


async def get_low_stock() -> List[InventoryItem]:
    """Rows whose quantity is at or below their own minStockLevel."""
    return await InventoryItem.filter(quantity__lte=F("min_stock_level")).order_by("quantity", "id").prefetch_related(
        "component", "location"
    )


def ledger_delta(txn: InventoryTransaction) -> Dict[int, int]:
    """Signed per-location quantity change recorded by one ledger row."""
    if txn.transaction_type == TransactionType.ADD:
        return {txn.to_location_id: txn.quantity}
    if txn.transaction_type == TransactionType.TRANSFER:
        return {txn.from_location_id: -txn.quantity, txn.to_location_id: txn.quantity}
    # consume and its legacy synonym remove take stock out of the system
    return {txn.from_location_id: -txn.quantity}


async def replay_ledger(component_id: int) -> Dict[int, int]:
    """Rebuilds per-location quantities of a component from zero using only the ledger."""
    totals: Dict[int, int] = defaultdict(int)
    for txn in await InventoryTransaction.filter(component_id=component_id).order_by("id"):
        for location_id, delta in ledger_delta(txn).items():
            totals[location_id] += delta
    return dict(totals)


async def audit_component(component_id: int) -> Dict:
    """Compares ledger replay with the stored stock rows of a component."""
    if not await Component.exists(id=component_id):
        raise NotFoundError(f"Component {component_id} not found.")

    replayed = await replay_ledger(component_id)
    stored = {
        item.location_id: item.quantity
        for item in await InventoryItem.filter(component_id=component_id)
    }
    discrepancies = [
        {"locationId": location_id, "stored": stored.get(location_id, 0), "replayed": replayed.get(location_id, 0)}
        for location_id in sorted(set(stored) | set(replayed))
        if stored.get(location_id, 0) != replayed.get(location_id, 0)
    ]
    return {
        "componentId": component_id,
        "consistent": not discrepancies,
        "stored": stored,
        "replayed": replayed,
        "discrepancies": discrepancies,
    }


async def get_recent_transactions(limit: int = 10) -> List[InventoryTransaction]:
    return await InventoryTransaction.all().order_by("-created_at", "-id").limit(limit).prefetch_related(
        "component", "from_location", "to_location"
    )


async def get_consumed_transactions() -> List[InventoryTransaction]:
    return await InventoryTransaction.filter(
        transaction_type__in=[TransactionType.CONSUME, TransactionType.REMOVE]
    ).order_by("-created_at", "-id").prefetch_related("component", "from_location", "to_location")


async def get_dashboard_stats() -> Dict:
    total_components = await Component.filter(is_active=True).count()

    quantity_by_location_type: Dict[str, int] = defaultdict(int)
    for item in await InventoryItem.all().prefetch_related("location"):
        quantity_by_location_type[item.location.location_type.value] += item.quantity

    return {
        "totalComponents": total_components,
        "totalLocations": await InventoryLocation.filter(is_active=True).count(),
        "quantityByLocationType": dict(quantity_by_location_type),
        "lowStockAlerts": await InventoryItem.filter(quantity__lte=F("min_stock_level")).count(),
    }
