import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from starlette.concurrency import run_in_threadpool

from app.api.deps import get_user_id
from app.schemas.data_exchange import ImportResultResponse
from app.schemas.response import SuccessResponse
from app.services.export_service import build_dashboard_export, export_csv
from app.services.import_service import import_inventory, import_template_csv, read_inventory_file

export_router = APIRouter()
import_router = APIRouter()
log = logging.getLogger("uvicorn")


def _csv_response(filename: str, content: str) -> Response:
    return Response(
        content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@export_router.get("/dashboard-data", response_model=SuccessResponse)
async def dashboard_export():
    """Stats, stock, recent activity and alerts in one document for BI tools."""
    return SuccessResponse(data=await build_dashboard_export())


@export_router.get("/csv")
async def csv_export(kind: str = Query(..., alias="type", description="inventory or transactions")):
    filename, content = await export_csv(kind)
    log.info(f"CSV export {filename} generated")
    return _csv_response(filename, content)


@import_router.post("/inventory", response_model=SuccessResponse)
async def inventory_import(
    file: UploadFile = File(...),
    location_id: Optional[int] = Form(None, alias="locationId"),
    skip_zero_quantity: bool = Form(False, alias="skipZeroQuantity"),
    user_id: Optional[int] = Depends(get_user_id),
):
    """Brings stock to the counted quantities of an uploaded CSV or Excel sheet."""
    content = await file.read()
    # Spreadsheet parsing is blocking work
    records = await run_in_threadpool(read_inventory_file, file.filename, content)
    result = await import_inventory(
        records, location_id=location_id, skip_zero_quantity=skip_zero_quantity, user_id=user_id
    )
    return SuccessResponse(data=ImportResultResponse.model_validate(result).dump())


@import_router.get("/template")
async def import_template():
    return _csv_response("inventory_import_template.csv", import_template_csv())
