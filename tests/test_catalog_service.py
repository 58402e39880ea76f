import pytest

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.facility import Facility, InventoryLocation
from app.services import catalog_service


@pytest.mark.asyncio
async def test_component_crud_and_soft_delete(db):
    created = await catalog_service.create_component(
        {"component_number": "217543", "description": "423X517MM 4OZ BRIG W/FELT 23MC", "category": "Fabric"},
        user_id=7,
    )
    assert created.created_by == 7

    with pytest.raises(ConflictError):
        await catalog_service.create_component({"component_number": "217543", "description": "dup"})

    updated = await catalog_service.update_component(created.id, {"supplier": "Brigade"}, user_id=8)
    assert updated.supplier == "Brigade"
    assert updated.updated_by == 8

    await catalog_service.deactivate_component(created.id)
    assert await catalog_service.list_components() == []
    assert len(await catalog_service.list_components(include_inactive=True)) == 1


@pytest.mark.asyncio
async def test_component_search_is_case_insensitive(component):
    assert [c.id for c in await catalog_service.list_components(search="brigade")] == [component.id]
    assert [c.id for c in await catalog_service.list_components(search="2175")] == [component.id]
    assert await catalog_service.list_components(search="felt") == []


@pytest.mark.asyncio
async def test_location_requires_existing_facility(facility):
    with pytest.raises(NotFoundError):
        await catalog_service.create_location({"facility_id": 999, "name": "Staging"})

    staging = await catalog_service.create_location({"facility_id": facility.id, "name": "Staging"})
    assert [loc.id for loc in await catalog_service.list_locations(facility.id)] == [staging.id]

    with pytest.raises(ConflictError):
        await catalog_service.create_location({"facility_id": facility.id, "name": "Staging"})


@pytest.mark.asyncio
async def test_facility_codes_are_unique(facility):
    with pytest.raises(ConflictError):
        await catalog_service.create_facility({"name": "Other", "code": "MAIN-001"})

    closed = await catalog_service.deactivate_facility(facility.id)
    assert closed.is_active is False
    assert await catalog_service.list_facilities() == []


@pytest.mark.asyncio
async def test_default_data_is_idempotent(db):
    first = await catalog_service.initialize_default_data()
    second = await catalog_service.initialize_default_data()

    assert first.id == second.id
    assert await Facility.all().count() == 1
    names = sorted(loc.name for loc in await InventoryLocation.filter(facility_id=first.id))
    assert names == ["Line Inventory", "Main Inventory"]


@pytest.mark.asyncio
async def test_location_rename_respects_facility_names(location_a, location_b):
    with pytest.raises(ConflictError):
        await catalog_service.update_location(location_b.id, {"name": "Main Inventory"})

    # Keeping its own name or picking a free one is fine
    same = await catalog_service.update_location(location_a.id, {"name": "Main Inventory", "aisle": "A1"})
    assert same.aisle == "A1"
    renamed = await catalog_service.update_location(location_b.id, {"name": "Line 2 Inventory"})
    assert renamed.name == "Line 2 Inventory"


@pytest.mark.asyncio
async def test_location_move_into_facility_with_same_name(location_a):
    other = await catalog_service.create_facility({"name": "Overflow", "code": "OVR-001"})
    await catalog_service.create_location({"facility_id": other.id, "name": "Main Inventory"})

    with pytest.raises(ConflictError):
        await catalog_service.update_location(location_a.id, {"facility_id": other.id})


@pytest.mark.asyncio
async def test_required_columns_cannot_be_cleared(component, location_a):
    with pytest.raises(ValidationError) as excinfo:
        await catalog_service.update_component(component.id, {"description": None, "category": None})
    assert excinfo.value.details == {"fields": ["description"]}

    with pytest.raises(ValidationError):
        await catalog_service.update_facility(location_a.facility_id, {"code": None})
    with pytest.raises(ValidationError):
        await catalog_service.update_location(location_a.id, {"name": None})

    # Optional columns may still be cleared
    cleared = await catalog_service.update_component(component.id, {"category": None})
    assert cleared.category is None
