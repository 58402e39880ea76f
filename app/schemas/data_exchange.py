from decimal import Decimal
from typing import List

from app.schemas.base import CamelModel


class ImportRowErrorResponse(CamelModel):
    row: int
    part_number: str
    error: str


class ImportResultResponse(CamelModel):
    """Outcome of a bulk inventory import, row errors included."""
    success: bool
    processed: int
    created: int
    updated: int
    skipped: int
    errors: List[ImportRowErrorResponse]
    new_components: List[str]
    updated_components: List[str]
    total_value: Decimal
