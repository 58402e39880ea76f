from typing import Optional

from fastapi import APIRouter, Query, status

from app.schemas.catalog import (
    FacilityCreate,
    FacilityResponse,
    FacilityUpdate,
    LocationCreate,
    LocationResponse,
    LocationUpdate,
)
from app.schemas.response import SuccessResponse
from app.services import catalog_service

facilities_router = APIRouter()
locations_router = APIRouter()


@facilities_router.get("", response_model=SuccessResponse)
async def list_facilities(include_inactive: bool = Query(False, alias="includeInactive")):
    facilities = await catalog_service.list_facilities(include_inactive)
    return SuccessResponse(data=[FacilityResponse.model_validate(f).dump() for f in facilities])


@facilities_router.get("/{facility_id}", response_model=SuccessResponse)
async def get_facility(facility_id: int):
    facility = await catalog_service.get_facility(facility_id)
    data = FacilityResponse.model_validate(facility).dump()
    data["locations"] = [LocationResponse.model_validate(loc).dump() for loc in facility.locations]
    return SuccessResponse(data=data)


@facilities_router.post("", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_facility(payload: FacilityCreate):
    facility = await catalog_service.create_facility(payload.model_dump())
    return SuccessResponse(data=FacilityResponse.model_validate(facility).dump())


@facilities_router.put("/{facility_id}", response_model=SuccessResponse)
async def update_facility(facility_id: int, payload: FacilityUpdate):
    facility = await catalog_service.update_facility(facility_id, payload.model_dump(exclude_unset=True))
    return SuccessResponse(data=FacilityResponse.model_validate(facility).dump())


@facilities_router.delete("/{facility_id}", response_model=SuccessResponse)
async def deactivate_facility(facility_id: int):
    facility = await catalog_service.deactivate_facility(facility_id)
    return SuccessResponse(data=FacilityResponse.model_validate(facility).dump())


@locations_router.get("", response_model=SuccessResponse)
async def list_locations(facility_id: Optional[int] = Query(None, alias="facilityId")):
    locations = await catalog_service.list_locations(facility_id)
    return SuccessResponse(data=[LocationResponse.model_validate(loc).dump() for loc in locations])


@locations_router.get("/{location_id}", response_model=SuccessResponse)
async def get_location(location_id: int):
    location = await catalog_service.get_location(location_id)
    return SuccessResponse(data=LocationResponse.model_validate(location).dump())


@locations_router.post("", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_location(payload: LocationCreate):
    location = await catalog_service.create_location(payload.model_dump())
    return SuccessResponse(data=LocationResponse.model_validate(location).dump())


@locations_router.put("/{location_id}", response_model=SuccessResponse)
async def update_location(location_id: int, payload: LocationUpdate):
    location = await catalog_service.update_location(location_id, payload.model_dump(exclude_unset=True))
    return SuccessResponse(data=LocationResponse.model_validate(location).dump())
