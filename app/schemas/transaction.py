from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field, RootModel

from app.models.inventory import TransactionType
from app.schemas.base import CamelModel
from app.schemas.catalog import ComponentResponse, LocationResponse
from app.schemas.inventory import StockLevelResponse


class AddStockRequest(CamelModel):
    """Schema for receiving stock at a location."""
    transaction_type: Literal["add"] = "add"
    component_id: int
    location_id: int
    quantity: int = Field(..., gt=0, description="Units received.")
    notes: Optional[str] = None


class TransferRequest(CamelModel):
    """Schema for moving stock between two locations."""
    transaction_type: Literal["transfer"] = "transfer"
    component_id: int
    from_location_id: int
    to_location_id: int
    quantity: int = Field(..., gt=0, description="Units moved.")
    notes: Optional[str] = None


class ConsumeRequest(CamelModel):
    """Schema for production usage; `remove` is accepted as a synonym."""
    transaction_type: Literal["consume", "remove"] = "consume"
    component_id: int
    location_id: int
    quantity: int = Field(..., gt=0, description="Units used.")
    notes: Optional[str] = None


# Tagged body for the generic endpoint, dispatched on transactionType
TransactionRequest = Annotated[
    Union[AddStockRequest, TransferRequest, ConsumeRequest],
    Field(discriminator="transaction_type"),
]


class TransactionEnvelope(RootModel[TransactionRequest]):
    pass


class TransactionResponse(CamelModel):
    id: int
    component_id: int
    from_location_id: Optional[int] = None
    to_location_id: Optional[int] = None
    quantity: int
    transaction_type: TransactionType
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime


class TransactionDetailResponse(TransactionResponse):
    component: ComponentResponse
    from_location: Optional[LocationResponse] = None
    to_location: Optional[LocationResponse] = None


class TransactionResultResponse(CamelModel):
    """Created ledger row plus the stock rows it changed."""
    transaction: TransactionResponse
    items: List[StockLevelResponse]
    low_stock: List[StockLevelResponse]
