import logging
from typing import Optional

from fastapi import APIRouter, Query

from app.schemas.inventory import AuditResponse, InventoryItemResponse, MinStockUpdate, StockLevelResponse
from app.schemas.response import SuccessResponse
from app.services.inventory_service import audit_component, get_inventory, get_inventory_item, get_low_stock
from app.services.transaction_service import set_min_stock_level

router = APIRouter()
log = logging.getLogger("uvicorn")


@router.get("", response_model=SuccessResponse)
async def list_inventory(location_id: Optional[int] = Query(None, alias="locationId")):
    """Current stock joined with component and location, optionally for one location."""
    items = await get_inventory(location_id)
    return SuccessResponse(data=[InventoryItemResponse.model_validate(item).dump() for item in items])


@router.get("/low-stock", response_model=SuccessResponse)
async def list_low_stock():
    """Rows at or below their minimum stock level."""
    items = await get_low_stock()
    return SuccessResponse(data=[InventoryItemResponse.model_validate(item).dump() for item in items])


@router.get("/audit/{component_id}", response_model=SuccessResponse)
async def audit_inventory(component_id: int):
    """Replays the ledger of a component and reports rows that disagree with it."""
    report = await audit_component(component_id)
    if not report["consistent"]:
        log.warning(f"Ledger mismatch for component {component_id}: {report['discrepancies']}")
    return SuccessResponse(data=AuditResponse.model_validate(report).dump())


@router.get("/{component_id}/{location_id}", response_model=SuccessResponse)
async def get_stock(component_id: int, location_id: int):
    item = await get_inventory_item(component_id, location_id)
    return SuccessResponse(data=InventoryItemResponse.model_validate(item).dump())


@router.patch("/{component_id}/{location_id}/min-stock", response_model=SuccessResponse)
async def update_min_stock(component_id: int, location_id: int, payload: MinStockUpdate):
    item = await set_min_stock_level(component_id, location_id, payload.min_stock_level)
    log.info(f"Min stock level for component {component_id} at location {location_id} set to {item.min_stock_level}")
    return SuccessResponse(data=StockLevelResponse.model_validate(item).dump())
