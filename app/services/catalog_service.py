import logging
from typing import Any, Dict, List, Optional

from tortoise.expressions import Q
from tortoise.transactions import in_transaction

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.catalog import Component
from app.models.facility import Facility, InventoryLocation, LocationType

log = logging.getLogger(__name__)

# Columns that may be changed but never cleared
COMPONENT_REQUIRED = ("component_number", "description", "is_active")
FACILITY_REQUIRED = ("name", "code", "is_active")
LOCATION_REQUIRED = ("facility_id", "name", "location_type", "is_active")


def reject_nulls(changes: Dict[str, Any], required) -> None:
    cleared = [name for name in required if name in changes and changes[name] is None]
    if cleared:
        raise ValidationError(f"{', '.join(cleared)} cannot be null.", details={"fields": cleared})


def _apply(instance, changes: Dict[str, Any]) -> List[str]:
    for name, value in changes.items():
        setattr(instance, name, value)
    return list(changes)


# ----------- Components -----------

async def list_components(search: Optional[str] = None, include_inactive: bool = False) -> List[Component]:
    query = Component.all()
    if not include_inactive:
        query = query.filter(is_active=True)
    if search:
        query = query.filter(Q(component_number__icontains=search) | Q(description__icontains=search))
    return await query.order_by("component_number")


async def get_component(component_id: int) -> Component:
    component = await Component.get_or_none(id=component_id).prefetch_related(
        "inventory_items", "inventory_items__location"
    )
    if not component:
        raise NotFoundError(f"Component {component_id} not found.")
    return component


async def create_component(data: Dict[str, Any], user_id: Optional[int] = None) -> Component:
    if await Component.exists(component_number=data["component_number"]):
        raise ConflictError(f"Component number {data['component_number']} already exists.")
    component = await Component.create(**data, created_by=user_id, updated_by=user_id)
    log.info(f"Component {component.component_number} created by user {user_id}")
    return component


async def update_component(component_id: int, changes: Dict[str, Any], user_id: Optional[int] = None) -> Component:
    reject_nulls(changes, COMPONENT_REQUIRED)
    component = await Component.get_or_none(id=component_id)
    if not component:
        raise NotFoundError(f"Component {component_id} not found.")
    number = changes.get("component_number")
    if number and number != component.component_number and await Component.exists(component_number=number):
        raise ConflictError(f"Component number {number} already exists.")
    fields = _apply(component, changes)
    component.updated_by = user_id
    await component.save(update_fields=fields + ["updated_by", "updated_at"])
    return component


async def deactivate_component(component_id: int, user_id: Optional[int] = None) -> Component:
    """Soft delete: the ledger keeps referencing the component."""
    return await update_component(component_id, {"is_active": False}, user_id)


# ----------- Facilities -----------

async def list_facilities(include_inactive: bool = False) -> List[Facility]:
    query = Facility.all() if include_inactive else Facility.filter(is_active=True)
    return await query.order_by("code")


async def get_facility(facility_id: int) -> Facility:
    facility = await Facility.get_or_none(id=facility_id).prefetch_related("locations")
    if not facility:
        raise NotFoundError(f"Facility {facility_id} not found.")
    return facility


async def create_facility(data: Dict[str, Any]) -> Facility:
    if await Facility.exists(code=data["code"]):
        raise ConflictError(f"Facility code {data['code']} already exists.")
    return await Facility.create(**data)


async def update_facility(facility_id: int, changes: Dict[str, Any]) -> Facility:
    reject_nulls(changes, FACILITY_REQUIRED)
    facility = await Facility.get_or_none(id=facility_id)
    if not facility:
        raise NotFoundError(f"Facility {facility_id} not found.")
    code = changes.get("code")
    if code and code != facility.code and await Facility.exists(code=code):
        raise ConflictError(f"Facility code {code} already exists.")
    fields = _apply(facility, changes)
    await facility.save(update_fields=fields + ["updated_at"])
    return facility


async def deactivate_facility(facility_id: int) -> Facility:
    return await update_facility(facility_id, {"is_active": False})


# ----------- Locations -----------

async def list_locations(facility_id: Optional[int] = None) -> List[InventoryLocation]:
    query = InventoryLocation.all()
    if facility_id is not None:
        query = query.filter(facility_id=facility_id)
    return await query.order_by("facility_id", "name")


async def get_location(location_id: int) -> InventoryLocation:
    location = await InventoryLocation.get_or_none(id=location_id)
    if not location:
        raise NotFoundError(f"Location {location_id} not found.")
    return location


async def create_location(data: Dict[str, Any]) -> InventoryLocation:
    facility_id = data["facility_id"]
    if not await Facility.exists(id=facility_id):
        raise NotFoundError(f"Facility {facility_id} not found.")
    if await InventoryLocation.exists(facility_id=facility_id, name=data["name"]):
        raise ConflictError(f"Location {data['name']} already exists in facility {facility_id}.")
    return await InventoryLocation.create(**data)


async def update_location(location_id: int, changes: Dict[str, Any]) -> InventoryLocation:
    reject_nulls(changes, LOCATION_REQUIRED)
    location = await get_location(location_id)
    if "facility_id" in changes and not await Facility.exists(id=changes["facility_id"]):
        raise NotFoundError(f"Facility {changes['facility_id']} not found.")

    facility_id = changes.get("facility_id", location.facility_id)
    name = changes.get("name", location.name)
    if (facility_id, name) != (location.facility_id, location.name):
        taken = await InventoryLocation.filter(facility_id=facility_id, name=name).exclude(id=location_id).exists()
        if taken:
            raise ConflictError(f"Location {name} already exists in facility {facility_id}.")
    fields = _apply(location, changes)
    await location.save(update_fields=fields)
    return location


# ----------- Default data -----------

async def initialize_default_data() -> Facility:
    """Creates the main facility with its storage and line locations when missing."""
    async with in_transaction() as conn:
        facility, created = await Facility.get_or_create(
            code="MAIN-001",
            defaults={
                "name": "Main Production Facility",
                "description": "Primary production facility",
                "address": "Production Floor",
            },
            using_db=conn,
        )
        if created:
            log.info("Default facility MAIN-001 created")

        defaults = [
            ("Main Inventory", "Central storage area", LocationType.WAREHOUSE),
            ("Line Inventory", "Production line stock", LocationType.PRODUCTION),
        ]
        for name, description, location_type in defaults:
            await InventoryLocation.get_or_create(
                facility=facility,
                name=name,
                defaults={"description": description, "location_type": location_type},
                using_db=conn,
            )
    return facility
