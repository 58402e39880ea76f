import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from tortoise.exceptions import IntegrityError
from tortoise.expressions import F

from app.core.config import TEMP_BARCODE_MAX_HOURS, TEMP_BARCODE_PREFIX
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.catalog import Barcode, BarcodePurpose, Component

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _is_expired(barcode: Barcode, now: datetime) -> bool:
    if not barcode.is_temporary or barcode.expires_at is None:
        return False
    return _as_utc(barcode.expires_at) <= _as_utc(now)


async def lookup_barcode(code: str, now: Optional[datetime] = None) -> Component:
    """
    Resolves a scanned code to an active component.

    Assigned and temporary barcodes are checked first; a temporary barcode
    that is expired or deactivated resolves to nothing even though its row
    still exists. Otherwise the code is matched against componentNumber.
    """
    code = (code or "").strip()
    if not code:
        raise ValidationError("Barcode is required.")
    now = now or _utcnow()

    barcode = await Barcode.get_or_none(barcode=code).prefetch_related("component")
    if barcode:
        if not barcode.is_active or _is_expired(barcode, now):
            raise NotFoundError(f"Barcode {code} is expired or inactive.")
        component = barcode.component
        if not component or not component.is_active:
            raise NotFoundError(f"Barcode {code} is not linked to an active component.")
        # Increment in SQL so concurrent scans are all counted
        await Barcode.filter(id=barcode.id).update(usage_count=F("usage_count") + 1, last_used_at=now)
        return component

    component = await Component.get_or_none(component_number=code, is_active=True)
    if not component:
        raise NotFoundError(f"No component found for barcode {code}.")
    return component


async def assign_barcode(component_id: int, code: str, user_id: Optional[int] = None) -> Barcode:
    """Creates a permanent barcode alias for a component."""
    code = (code or "").strip()
    if not code:
        raise ValidationError("Barcode is required.")
    component = await Component.get_or_none(id=component_id)
    if not component:
        raise NotFoundError(f"Component {component_id} not found.")
    if await Barcode.exists(barcode=code):
        raise ConflictError(f"Barcode {code} is already assigned.")
    try:
        return await Barcode.create(barcode=code, component=component, is_temporary=False, created_by=user_id)
    except IntegrityError as e:
        # Lost a race with a concurrent assignment of the same code
        raise ConflictError(f"Barcode {code} is already assigned.") from e


async def _unique_temporary_code() -> str:
    while True:
        code = f"{TEMP_BARCODE_PREFIX}{secrets.token_hex(4).upper()}"
        if not await Barcode.exists(barcode=code):
            return code


async def create_temporary_barcode(
    purpose: BarcodePurpose,
    expiration_hours: int,
    component_id: Optional[int] = None,
    description: Optional[str] = None,
    user_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Barcode:
    if not 1 <= expiration_hours <= TEMP_BARCODE_MAX_HOURS:
        raise ValidationError(f"Expiration must be between 1 and {TEMP_BARCODE_MAX_HOURS} hours.")
    if component_id is not None and not await Component.exists(id=component_id):
        raise NotFoundError(f"Component {component_id} not found.")

    now = now or _utcnow()
    barcode = await Barcode.create(
        barcode=await _unique_temporary_code(),
        component_id=component_id,
        is_temporary=True,
        purpose=purpose,
        description=description,
        expires_at=now + timedelta(hours=expiration_hours),
        created_by=user_id,
    )
    log.info(f"Temporary barcode {barcode.barcode} created ({purpose.value}, {expiration_hours}h)")
    return barcode


async def list_temporary_barcodes() -> List[Barcode]:
    return await Barcode.filter(is_temporary=True).order_by("-created_at", "-id")


async def deactivate_temporary_barcode(barcode_id: int) -> Barcode:
    barcode = await Barcode.get_or_none(id=barcode_id, is_temporary=True)
    if not barcode:
        raise NotFoundError(f"Temporary barcode {barcode_id} not found.")
    barcode.is_active = False
    await barcode.save(update_fields=["is_active"])
    return barcode


async def cleanup_expired(now: Optional[datetime] = None) -> int:
    """Deactivates every expired temporary barcode; returns how many were touched."""
    now = now or _utcnow()
    count = await Barcode.filter(is_temporary=True, is_active=True, expires_at__lte=now).update(is_active=False)
    if count:
        log.info(f"Deactivated {count} expired temporary barcodes")
    return count
