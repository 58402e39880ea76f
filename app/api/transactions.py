import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status

from app.api.deps import get_publisher, get_user_id
from app.core.errors import InventoryError
from app.schemas.response import SuccessResponse
from app.schemas.transaction import (
    AddStockRequest,
    ConsumeRequest,
    TransactionDetailResponse,
    TransactionEnvelope,
    TransactionResultResponse,
    TransferRequest,
)
from app.services.inventory_service import get_consumed_transactions, get_recent_transactions
from app.services.transaction_service import (
    TransactionResult,
    add_stock,
    consume_stock,
    publish_change,
    transfer_stock,
)

router = APIRouter()
log = logging.getLogger("uvicorn")


def _result_response(result: TransactionResult) -> SuccessResponse:
    return SuccessResponse(data=TransactionResultResponse.model_validate(result).dump())


async def _execute(request, user_id: Optional[int], publisher, background_tasks: BackgroundTasks) -> SuccessResponse:
    """Routes a validated request DTO to its engine operation; the push runs after the response is sent."""
    try:
        if isinstance(request, AddStockRequest):
            result = await add_stock(
                request.component_id, request.location_id, request.quantity,
                notes=request.notes, user_id=user_id,
            )
        elif isinstance(request, TransferRequest):
            result = await transfer_stock(
                request.component_id, request.from_location_id, request.to_location_id, request.quantity,
                notes=request.notes, user_id=user_id,
            )
        else:
            result = await consume_stock(
                request.component_id, request.location_id, request.quantity,
                notes=request.notes, user_id=user_id,
            )
    except InventoryError:
        # Mapped to a structured 4xx response by the registered handler
        raise
    except Exception as e:
        log.error(f"Error applying {request.transaction_type} transaction: {e}")
        raise HTTPException(status_code=500, detail=f"Server failed to apply {request.transaction_type} transaction.")

    background_tasks.add_task(publish_change, publisher, result)
    return _result_response(result)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_transaction(
    request: TransactionEnvelope,
    background_tasks: BackgroundTasks,
    user_id: Optional[int] = Depends(get_user_id),
    publisher=Depends(get_publisher),
):
    """Applies any transaction kind, selected by the `transactionType` tag of the body."""
    return await _execute(request.root, user_id, publisher, background_tasks)


@router.post("/add", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def add_endpoint(
    request: AddStockRequest,
    background_tasks: BackgroundTasks,
    user_id: Optional[int] = Depends(get_user_id),
    publisher=Depends(get_publisher),
):
    return await _execute(request, user_id, publisher, background_tasks)


@router.post("/transfer", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def transfer_endpoint(
    request: TransferRequest,
    background_tasks: BackgroundTasks,
    user_id: Optional[int] = Depends(get_user_id),
    publisher=Depends(get_publisher),
):
    return await _execute(request, user_id, publisher, background_tasks)


@router.post("/consume", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def consume_endpoint(
    request: ConsumeRequest,
    background_tasks: BackgroundTasks,
    user_id: Optional[int] = Depends(get_user_id),
    publisher=Depends(get_publisher),
):
    return await _execute(request, user_id, publisher, background_tasks)


@router.post("/remove", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def remove_endpoint(
    request: ConsumeRequest,
    background_tasks: BackgroundTasks,
    user_id: Optional[int] = Depends(get_user_id),
    publisher=Depends(get_publisher),
):
    """Older clients remove stock through here; it is recorded as a consume."""
    return await _execute(request, user_id, publisher, background_tasks)


@router.get("/recent", response_model=SuccessResponse)
async def recent_transactions(limit: int = Query(10, ge=1, le=200)):
    transactions = await get_recent_transactions(limit)
    return SuccessResponse(data=[TransactionDetailResponse.model_validate(t).dump() for t in transactions])


@router.get("/consumed", response_model=SuccessResponse)
async def consumed_transactions():
    transactions = await get_consumed_transactions()
    return SuccessResponse(data=[TransactionDetailResponse.model_validate(t).dump() for t in transactions])
