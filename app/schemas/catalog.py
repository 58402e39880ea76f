from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from app.models.facility import LocationType
from app.schemas.base import CamelModel


class ComponentCreate(CamelModel):
    component_number: str = Field(..., min_length=1, max_length=50, description="Unique part number.")
    description: str = Field(..., min_length=1)
    category: Optional[str] = None
    supplier: Optional[str] = None
    unit_price: Optional[Decimal] = Field(None, ge=0)
    plate_number: Optional[str] = None


class ComponentUpdate(CamelModel):
    component_number: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    supplier: Optional[str] = None
    unit_price: Optional[Decimal] = Field(None, ge=0)
    plate_number: Optional[str] = None
    is_active: Optional[bool] = None


class ComponentResponse(CamelModel):
    id: int
    component_number: str
    description: str
    category: Optional[str] = None
    supplier: Optional[str] = None
    unit_price: Optional[Decimal] = None
    plate_number: Optional[str] = None
    is_active: bool
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class FacilityCreate(CamelModel):
    name: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class FacilityUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: Optional[bool] = None


class FacilityResponse(CamelModel):
    id: int
    name: str
    code: str
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: bool


class LocationCreate(CamelModel):
    facility_id: int
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    location_type: LocationType = LocationType.WAREHOUSE
    aisle: Optional[str] = None
    rack: Optional[str] = None
    shelf: Optional[str] = None
    bin: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)


class LocationUpdate(CamelModel):
    facility_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    location_type: Optional[LocationType] = None
    aisle: Optional[str] = None
    rack: Optional[str] = None
    shelf: Optional[str] = None
    bin: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class LocationResponse(CamelModel):
    id: int
    facility_id: int
    name: str
    description: Optional[str] = None
    location_type: LocationType
    aisle: Optional[str] = None
    rack: Optional[str] = None
    shelf: Optional[str] = None
    bin: Optional[str] = None
    capacity: Optional[int] = None
    is_active: bool
