import uuid
from typing import Any, Optional

from pydantic import BaseModel, Field


def new_request_id() -> str:
    return uuid.uuid4().hex


class SuccessResponse(BaseModel):
    """Envelope of every successful API response; `data` carries the camelCase payload."""
    success: bool = True
    request_id: str = Field(default_factory=new_request_id)
    data: Optional[Any] = None


class ErrorDetail(BaseModel):
    code: str = Field(..., description="Machine-readable error kind, e.g. insufficient_stock.")
    message: Any
    details: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Envelope of every failed API response."""
    success: bool = False
    error: ErrorDetail
    request_id: str = Field(default_factory=new_request_id)
