import logging
from typing import Optional

from fastapi import APIRouter, Depends, status

from app.api.deps import get_user_id
from app.schemas.barcode import BarcodeAssignRequest, BarcodeLookupRequest, BarcodeResponse, TemporaryBarcodeCreate
from app.schemas.catalog import ComponentResponse
from app.schemas.response import SuccessResponse
from app.services.barcode_service import (
    assign_barcode,
    cleanup_expired,
    create_temporary_barcode,
    deactivate_temporary_barcode,
    list_temporary_barcodes,
    lookup_barcode,
)

# Mounted under /api; lookup keeps its historical singular path
router = APIRouter()
log = logging.getLogger("uvicorn")


@router.post("/barcode/lookup", response_model=SuccessResponse)
async def lookup_endpoint(payload: BarcodeLookupRequest):
    """Resolves a scanned code to its component, or 404."""
    component = await lookup_barcode(payload.barcode)
    return SuccessResponse(data=ComponentResponse.model_validate(component).dump())


@router.post("/barcodes", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def assign_endpoint(payload: BarcodeAssignRequest, user_id: Optional[int] = Depends(get_user_id)):
    barcode = await assign_barcode(payload.component_id, payload.barcode, user_id=user_id)
    log.info(f"Barcode {barcode.barcode} assigned to component {payload.component_id}")
    return SuccessResponse(data=BarcodeResponse.model_validate(barcode).dump())


@router.get("/barcodes/temporary", response_model=SuccessResponse)
async def list_temporary_endpoint():
    barcodes = await list_temporary_barcodes()
    return SuccessResponse(data=[BarcodeResponse.model_validate(b).dump() for b in barcodes])


@router.post("/barcodes/temporary", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_temporary_endpoint(payload: TemporaryBarcodeCreate, user_id: Optional[int] = Depends(get_user_id)):
    barcode = await create_temporary_barcode(
        purpose=payload.purpose,
        expiration_hours=payload.expiration_hours,
        component_id=payload.component_id,
        description=payload.description,
        user_id=user_id,
    )
    return SuccessResponse(data=BarcodeResponse.model_validate(barcode).dump())


@router.post("/barcodes/temporary/cleanup", response_model=SuccessResponse)
async def cleanup_endpoint():
    """Deactivates every expired temporary barcode."""
    return SuccessResponse(data={"deactivated": await cleanup_expired()})


@router.delete("/barcodes/temporary/{barcode_id}", response_model=SuccessResponse)
async def deactivate_temporary_endpoint(barcode_id: int):
    barcode = await deactivate_temporary_barcode(barcode_id)
    return SuccessResponse(data=BarcodeResponse.model_validate(barcode).dump())
