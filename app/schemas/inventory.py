from datetime import datetime
from typing import Dict, List

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.catalog import ComponentResponse, LocationResponse


class StockLevelResponse(CamelModel):
    """Schema for one current-stock row without its joined entities."""
    id: int
    component_id: int
    location_id: int
    quantity: int
    min_stock_level: int
    is_low_stock: bool
    last_updated: datetime


class InventoryItemResponse(StockLevelResponse):
    """Stock row joined with its component and location for display."""
    component: ComponentResponse
    location: LocationResponse


class MinStockUpdate(CamelModel):
    min_stock_level: int = Field(..., ge=0, description="Quantity at or below which the row counts as low stock.")


class Discrepancy(CamelModel):
    location_id: int
    stored: int
    replayed: int


class AuditResponse(CamelModel):
    component_id: int
    consistent: bool
    stored: Dict[int, int]
    replayed: Dict[int, int]
    discrepancies: List[Discrepancy]
