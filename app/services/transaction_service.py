"""
Inventory transaction engine: the only code path that changes stock quantities.

Every operation runs as one atomic unit: the affected InventoryItem rows are
locked (SELECT ... FOR UPDATE), preconditions are checked against the locked
values, rows are mutated, one ledger row and its outbox events are written,
and the whole unit commits together. The change push to connected clients
happens after commit and is best effort.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from tortoise.exceptions import IntegrityError, OperationalError, TransactionManagementError
from tortoise.transactions import in_transaction

from app.core.config import DEFAULT_CONSUME_NOTES, PUBLISH_TIMEOUT, TRANSACTION_RETRIES
from app.core.errors import ConflictError, InsufficientStockError, NotFoundError, ValidationError
from app.events.outbox_utility import INVENTORY_UPDATED, LOW_STOCK_ALERT, create_outbox_event
from app.models.catalog import Component
from app.models.facility import InventoryLocation
from app.models.inventory import InventoryItem, InventoryTransaction, TransactionType

log = logging.getLogger(__name__)

# Store errors raised when a concurrent unit of work invalidated ours
RETRYABLE_ERRORS = (IntegrityError, OperationalError, TransactionManagementError)


@dataclass
class TransactionResult:
    transaction: InventoryTransaction
    items: List[InventoryItem]
    # Rows that crossed from above their threshold to at-or-below it
    low_stock: List[InventoryItem] = field(default_factory=list)


def _validate_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError(f"Quantity must be an integer, got {quantity!r}.")
    if quantity <= 0:
        raise ValidationError(f"Quantity must be greater than zero, got {quantity}.")
    return quantity


async def _get_component(component_id: int, conn, require_active: bool = False) -> Component:
    component = await Component.get_or_none(id=component_id).using_db(conn)
    if not component:
        raise NotFoundError(f"Component {component_id} not found.")
    if require_active and not component.is_active:
        raise ValidationError(f"Component {component.component_number} is inactive.")
    return component


async def _get_location(location_id: int, conn, require_active: bool = False) -> InventoryLocation:
    location = await InventoryLocation.get_or_none(id=location_id).using_db(conn)
    if not location:
        raise NotFoundError(f"Location {location_id} not found.")
    if require_active and not location.is_active:
        raise ValidationError(f"Location {location.name} is inactive.")
    return location


async def _lock_items(component_id: int, location_ids: List[int], conn) -> dict:
    """Locks the existing stock rows of a component at the given locations, in id order."""
    locked = await InventoryItem.filter(
        component_id=component_id, location_id__in=location_ids
    ).order_by("id").select_for_update().using_db(conn)
    return {item.location_id: item for item in locked}


async def _create_item(component_id: int, location_id: int, conn) -> InventoryItem:
    # A racing request creating the same pair fails on the unique constraint and is retried
    return await InventoryItem.create(
        component_id=component_id, location_id=location_id, quantity=0, using_db=conn
    )


async def _apply_delta(item: InventoryItem, delta: int, conn) -> int:
    """Changes the quantity of a locked row and returns the quantity it had before."""
    before = item.quantity
    item.quantity = before + delta
    await item.save(update_fields=["quantity", "last_updated"], using_db=conn)
    return before


async def check_for_low_stock(item: InventoryItem, before: int, txn: InventoryTransaction, conn: Any) -> bool:
    """
    Emits a low stock alert when `item` just crossed its threshold.

    Only the transition from above the threshold to at-or-below it fires, so
    a row that is already low stays quiet on further mutations.
    """
    if not (before > item.min_stock_level >= item.quantity):
        return False

    log.warning(
        f"Low stock detected for component {item.component_id} at location {item.location_id}: "
        f"{item.quantity} <= {item.min_stock_level}"
    )
    await create_outbox_event(
        aggregate_type="inventory_item",
        aggregate_id=item.id,
        event_type=LOW_STOCK_ALERT,
        payload={
            "componentId": item.component_id,
            "locationId": item.location_id,
            "quantity": item.quantity,
            "minStockLevel": item.min_stock_level,
            "triggeredByTransactionId": txn.id,
        },
        conn=conn,
    )
    return True


async def _record(
    conn,
    component_id: int,
    transaction_type: TransactionType,
    quantity: int,
    notes: Optional[str],
    user_id: Optional[int],
    from_location_id: Optional[int] = None,
    to_location_id: Optional[int] = None,
) -> InventoryTransaction:
    txn = await InventoryTransaction.create(
        component_id=component_id,
        from_location_id=from_location_id,
        to_location_id=to_location_id,
        quantity=quantity,
        transaction_type=transaction_type,
        notes=notes,
        created_by=user_id,
        using_db=conn,
    )
    await create_outbox_event(
        aggregate_type="inventory_transaction",
        aggregate_id=txn.id,
        event_type=INVENTORY_UPDATED,
        payload=_change_payload(txn),
        conn=conn,
    )
    return txn


def _change_payload(txn: InventoryTransaction) -> dict:
    return {
        "transactionId": txn.id,
        "type": txn.transaction_type.value,
        "componentId": txn.component_id,
        "fromLocationId": txn.from_location_id,
        "toLocationId": txn.to_location_id,
        "quantity": txn.quantity,
    }


async def _run_atomic(operation: str, unit, *args) -> TransactionResult:
    """
    Runs `unit(conn, *args)` inside one database transaction.

    A store-level conflict rolls the unit back and runs it again from the
    start, up to TRANSACTION_RETRIES times, before surfacing ConflictError.
    Domain errors are never retried.
    """
    attempts = TRANSACTION_RETRIES + 1
    for attempt in range(1, attempts + 1):
        try:
            async with in_transaction() as conn:
                return await unit(conn, *args)
        except RETRYABLE_ERRORS as e:
            if attempt == attempts:
                log.error(f"{operation} failed after {attempts} attempts: {e}")
                raise ConflictError(f"Concurrent update prevented {operation}. Please retry.") from e
            log.warning(f"{operation} conflicted with a concurrent update, retrying: {e}")


async def publish_change(publisher, result: TransactionResult):
    """
    Pushes a committed change to connected clients.

    Runs after commit and is bounded by PUBLISH_TIMEOUT; neither a failure nor
    a stalled transport affects the committed unit. HTTP handlers schedule it
    as a background task so the response never waits for it.
    """
    if publisher is None:
        return
    message = {"type": "INVENTORY_UPDATED", "data": _change_payload(result.transaction)}
    try:
        await asyncio.wait_for(publisher.publish(message), timeout=PUBLISH_TIMEOUT)
    except asyncio.TimeoutError:
        log.warning(f"Change notification for transaction {result.transaction.id} timed out after {PUBLISH_TIMEOUT}s")
    except Exception as e:
        log.warning(f"Change notification for transaction {result.transaction.id} failed: {e}")


# ----------- Units of work -----------

async def _add_unit(conn, component_id, location_id, quantity, notes, user_id) -> TransactionResult:
    await _get_component(component_id, conn, require_active=True)
    await _get_location(location_id, conn, require_active=True)

    locked = await _lock_items(component_id, [location_id], conn)
    item = locked.get(location_id) or await _create_item(component_id, location_id, conn)
    await _apply_delta(item, quantity, conn)

    txn = await _record(
        conn, component_id, TransactionType.ADD, quantity, notes, user_id, to_location_id=location_id
    )
    # Stock only grows here, so no threshold can be crossed downwards
    return TransactionResult(transaction=txn, items=[item])


async def _transfer_unit(conn, component_id, from_location_id, to_location_id, quantity, notes, user_id) -> TransactionResult:
    await _get_component(component_id, conn)
    await _get_location(from_location_id, conn)
    await _get_location(to_location_id, conn, require_active=True)

    locked = await _lock_items(component_id, [from_location_id, to_location_id], conn)
    source = locked.get(from_location_id)
    available = source.quantity if source else 0
    if available < quantity:
        raise InsufficientStockError(component_id, from_location_id, quantity, available)

    destination = locked.get(to_location_id) or await _create_item(component_id, to_location_id, conn)
    source_before = await _apply_delta(source, -quantity, conn)
    await _apply_delta(destination, quantity, conn)

    txn = await _record(
        conn, component_id, TransactionType.TRANSFER, quantity, notes, user_id,
        from_location_id=from_location_id, to_location_id=to_location_id,
    )
    low_stock = [source] if await check_for_low_stock(source, source_before, txn, conn) else []
    return TransactionResult(transaction=txn, items=[source, destination], low_stock=low_stock)


async def _consume_unit(conn, component_id, location_id, quantity, notes, user_id) -> TransactionResult:
    await _get_component(component_id, conn)
    await _get_location(location_id, conn)

    locked = await _lock_items(component_id, [location_id], conn)
    item = locked.get(location_id)
    available = item.quantity if item else 0
    if available < quantity:
        raise InsufficientStockError(component_id, location_id, quantity, available)

    before = await _apply_delta(item, -quantity, conn)
    txn = await _record(
        conn, component_id, TransactionType.CONSUME, quantity, notes or DEFAULT_CONSUME_NOTES, user_id,
        from_location_id=location_id,
    )
    low_stock = [item] if await check_for_low_stock(item, before, txn, conn) else []
    return TransactionResult(transaction=txn, items=[item], low_stock=low_stock)


# ----------- Public operations -----------

async def add_stock(
    component_id: int,
    location_id: int,
    quantity: int,
    notes: Optional[str] = None,
    user_id: Optional[int] = None,
    publisher=None,
) -> TransactionResult:
    """Receives stock at a location, creating its inventory row on first arrival."""
    _validate_quantity(quantity)
    result = await _run_atomic("add", _add_unit, component_id, location_id, quantity, notes, user_id)
    log.info(f"Added {quantity} of component {component_id} at location {location_id} (txn {result.transaction.id})")
    await publish_change(publisher, result)
    return result


async def transfer_stock(
    component_id: int,
    from_location_id: int,
    to_location_id: int,
    quantity: int,
    notes: Optional[str] = None,
    user_id: Optional[int] = None,
    publisher=None,
) -> TransactionResult:
    """Moves stock between two locations without changing the component's total."""
    if from_location_id == to_location_id:
        raise ValidationError("Source and destination locations must be different.")
    _validate_quantity(quantity)
    result = await _run_atomic(
        "transfer", _transfer_unit, component_id, from_location_id, to_location_id, quantity, notes, user_id
    )
    log.info(
        f"Transferred {quantity} of component {component_id} from location {from_location_id} "
        f"to {to_location_id} (txn {result.transaction.id})"
    )
    await publish_change(publisher, result)
    return result


async def consume_stock(
    component_id: int,
    location_id: int,
    quantity: int,
    notes: Optional[str] = None,
    user_id: Optional[int] = None,
    publisher=None,
) -> TransactionResult:
    """Takes stock out of the system (production usage)."""
    _validate_quantity(quantity)
    result = await _run_atomic("consume", _consume_unit, component_id, location_id, quantity, notes, user_id)
    log.info(f"Consumed {quantity} of component {component_id} at location {location_id} (txn {result.transaction.id})")
    await publish_change(publisher, result)
    return result


# `remove` is accepted for older clients and behaves exactly like consume
remove_stock = consume_stock


async def set_min_stock_level(component_id: int, location_id: int, min_stock_level: int) -> InventoryItem:
    """Changes the low stock threshold of an existing row. Quantity is left untouched."""
    if isinstance(min_stock_level, bool) or not isinstance(min_stock_level, int) or min_stock_level < 0:
        raise ValidationError(f"Minimum stock level must be a non-negative integer, got {min_stock_level!r}.")

    async with in_transaction() as conn:
        locked = await _lock_items(component_id, [location_id], conn)
        item = locked.get(location_id)
        if not item:
            raise NotFoundError(f"No inventory for component {component_id} at location {location_id}.")
        item.min_stock_level = min_stock_level
        await item.save(update_fields=["min_stock_level", "last_updated"], using_db=conn)
    return item
