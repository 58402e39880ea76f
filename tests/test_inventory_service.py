import pytest

from app.core.errors import NotFoundError
from app.models.inventory import InventoryItem
from app.services.inventory_service import (
    audit_component,
    get_consumed_transactions,
    get_dashboard_stats,
    get_inventory,
    get_inventory_item,
    get_low_stock,
    get_recent_transactions,
)
from app.services.transaction_service import add_stock, consume_stock, set_min_stock_level, transfer_stock


@pytest.mark.asyncio
async def test_inventory_is_joined_and_filterable(component, location_a, location_b):
    await add_stock(component.id, location_a.id, 10)
    await transfer_stock(component.id, location_a.id, location_b.id, 4)

    everything = await get_inventory()
    at_b = await get_inventory(location_b.id)

    assert len(everything) == 2
    assert [item.quantity for item in at_b] == [4]
    assert at_b[0].component.component_number == "217520"
    assert at_b[0].location.name == "Line Inventory"
    assert await get_inventory(9999) == []


@pytest.mark.asyncio
async def test_single_item_lookup(component, location_a):
    with pytest.raises(NotFoundError):
        await get_inventory_item(component.id, location_a.id)

    await add_stock(component.id, location_a.id, 2)
    item = await get_inventory_item(component.id, location_a.id)
    assert item.quantity == 2


@pytest.mark.asyncio
async def test_low_stock_includes_rows_at_threshold(component, location_a, location_b):
    await add_stock(component.id, location_a.id, 5)   # equal to default minimum
    await add_stock(component.id, location_b.id, 6)

    low = await get_low_stock()

    assert [item.location_id for item in low] == [location_a.id]


@pytest.mark.asyncio
async def test_low_stock_uses_each_rows_own_threshold(component, location_a, location_b):
    await add_stock(component.id, location_a.id, 12)
    await add_stock(component.id, location_b.id, 3)
    await set_min_stock_level(component.id, location_a.id, 20)
    await set_min_stock_level(component.id, location_b.id, 0)

    low = await get_low_stock()

    assert [item.location_id for item in low] == [location_a.id]
    assert low[0].component.component_number == "217520"
    assert (await get_dashboard_stats())["lowStockAlerts"] == 1


@pytest.mark.asyncio
async def test_audit_flags_rows_changed_outside_the_engine(component, location_a):
    await add_stock(component.id, location_a.id, 10)
    assert (await audit_component(component.id))["consistent"] is True

    await InventoryItem.filter(component_id=component.id).update(quantity=99)
    report = await audit_component(component.id)

    assert report["consistent"] is False
    assert report["discrepancies"] == [{"locationId": location_a.id, "stored": 99, "replayed": 10}]


@pytest.mark.asyncio
async def test_audit_unknown_component(db):
    with pytest.raises(NotFoundError):
        await audit_component(4242)


@pytest.mark.asyncio
async def test_recent_and_consumed_transactions(component, location_a):
    await add_stock(component.id, location_a.id, 10)
    await consume_stock(component.id, location_a.id, 1)
    await consume_stock(component.id, location_a.id, 2)

    recent = await get_recent_transactions(limit=2)
    consumed = await get_consumed_transactions()

    assert [t.quantity for t in recent] == [2, 1]
    assert [t.quantity for t in consumed] == [2, 1]
    assert consumed[0].from_location.name == "Main Inventory"


@pytest.mark.asyncio
async def test_dashboard_stats(component, location_a, location_b):
    await add_stock(component.id, location_a.id, 10)
    await transfer_stock(component.id, location_a.id, location_b.id, 3)

    stats = await get_dashboard_stats()

    assert stats["totalComponents"] == 1
    assert stats["quantityByLocationType"] == {"warehouse": 7, "production": 3}
    assert stats["lowStockAlerts"] == 1
