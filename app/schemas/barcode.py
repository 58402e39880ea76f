from datetime import datetime
from typing import Optional

from pydantic import Field

from app.core.config import TEMP_BARCODE_DEFAULT_HOURS, TEMP_BARCODE_MAX_HOURS
from app.models.catalog import BarcodePurpose
from app.schemas.base import CamelModel


class BarcodeLookupRequest(CamelModel):
    barcode: str = Field(..., min_length=1, description="Scanned barcode, QR payload or component number.")


class BarcodeAssignRequest(CamelModel):
    component_id: int
    barcode: str = Field(..., min_length=1, max_length=100)


class TemporaryBarcodeCreate(CamelModel):
    component_id: Optional[int] = None
    purpose: BarcodePurpose = BarcodePurpose.TESTING
    description: Optional[str] = None
    expiration_hours: int = Field(TEMP_BARCODE_DEFAULT_HOURS, ge=1, le=TEMP_BARCODE_MAX_HOURS)


class BarcodeResponse(CamelModel):
    id: int
    barcode: str
    component_id: Optional[int] = None
    is_temporary: bool
    purpose: Optional[BarcodePurpose] = None
    description: Optional[str] = None
    expires_at: Optional[datetime] = None
    is_active: bool
    usage_count: int
    last_used_at: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: datetime
