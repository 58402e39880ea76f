"""
Bulk inventory import from CSV or Excel sheets.

Each row names a part and the quantity counted on hand. Unknown parts are
created, and the stock row is brought to the counted quantity through the
transaction engine (add for a surplus, consume for a shortfall), so imports
show up in the ledger like any other movement.
"""
import csv
import io
import logging
import os
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

import pandas as pd

from app.core.errors import InventoryError, NotFoundError, ValidationError
from app.models.catalog import Component
from app.models.facility import InventoryLocation
from app.models.inventory import InventoryItem
from app.services.catalog_service import create_component
from app.services.transaction_service import add_stock, consume_stock

log = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".xlsx")
PART_NUMBER_MAX_LENGTH = 50
DEFAULT_CATEGORY = "General"

# Checked in order; the first pattern matching a normalized header wins
HEADER_PATTERNS = [
    ("part_number", re.compile(r"(part|item|component|sku|product).*num(ber)?|^(partno|itemno)$")),
    ("description", re.compile(r"desc|name|title")),
    ("quantity", re.compile(r"qty|quantity|count|stock|onhand|available")),
    ("location", re.compile(r"loc|warehouse|bin|shelf")),
    ("category", re.compile(r"cat|type|class")),
    ("supplier", re.compile(r"supplier|vendor|manufacturer|brand")),
    ("unit_price", re.compile(r"price|cost")),
    ("notes", re.compile(r"note|comment|remarks")),
]

TEMPLATE_ROWS = [
    {"Part Number": "ABC123", "Description": "Sample Component Description", "Quantity": 100,
     "Location": "Main Inventory", "Category": "Electronics", "Supplier": "Supplier Name",
     "Unit Price": "12.50", "Notes": "Optional notes"},
    {"Part Number": "XYZ789", "Description": "Another Component", "Quantity": 50,
     "Location": "Main Inventory", "Category": "Mechanical", "Supplier": "Another Supplier",
     "Unit Price": "25.00", "Notes": ""},
]


@dataclass
class ImportRecord:
    row: int
    part_number: str
    quantity: str = ""
    description: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    supplier: Optional[str] = None
    unit_price: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class ImportRowError:
    row: int
    part_number: str
    error: str


@dataclass
class ImportResult:
    success: bool = False
    processed: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: List[ImportRowError] = field(default_factory=list)
    new_components: List[str] = field(default_factory=list)
    updated_components: List[str] = field(default_factory=list)
    total_value: Decimal = Decimal("0")


def clean_part_number(value: str) -> str:
    """Upper-cases, keeps word characters and hyphens, drops leading zeros."""
    cleaned = re.sub(r"[^\w-]", "", str(value or "").strip().upper()).lstrip("0")
    return cleaned[:PART_NUMBER_MAX_LENGTH]


def parse_number(value: Optional[str]) -> Optional[Decimal]:
    """Parses '1,250', '$12.50' and the like; returns None when not a number."""
    cleaned = re.sub(r"[,$\s]", "", str(value or ""))
    if not cleaned:
        return None
    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def map_headers(headers: List[str]) -> Dict[str, str]:
    """Maps sheet column names to record fields, first column per field wins."""
    mapping: Dict[str, str] = {}
    taken = set()
    for header in headers:
        normalized = re.sub(r"[^a-z0-9]", "", str(header).lower())
        for field_name, pattern in HEADER_PATTERNS:
            if pattern.search(normalized):
                if field_name not in taken:
                    mapping[header] = field_name
                    taken.add(field_name)
                break
    return mapping


def read_inventory_file(filename: str, content: bytes) -> List[ImportRecord]:
    """Parses an uploaded sheet into records; rows without a part number are dropped."""
    extension = os.path.splitext((filename or "").lower())[1]
    if extension not in SUPPORTED_EXTENSIONS:
        raise ValidationError(
            f"Unsupported file format {extension or filename!r}. Use CSV or Excel (.xlsx) files.",
            details={"supported": list(SUPPORTED_EXTENSIONS)},
        )
    try:
        if extension == ".csv":
            frame = pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False)
        else:
            frame = pd.read_excel(io.BytesIO(content), dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        raise ValidationError("The uploaded file is empty.") from None

    mapping = map_headers(list(frame.columns))
    if "part_number" not in mapping.values():
        raise ValidationError("No part number column found.", details={"columns": list(frame.columns)})

    records = []
    # Header is sheet row 1, so data starts at row 2
    for index, row in enumerate(frame.to_dict(orient="records"), start=2):
        values = {
            field_name: str(row[header]).strip()
            for header, field_name in mapping.items()
            if str(row[header]).strip()
        }
        if not values.get("part_number"):
            continue
        records.append(ImportRecord(row=index, **values))
    return records


async def _default_location() -> InventoryLocation:
    locations = await InventoryLocation.filter(is_active=True).order_by("id")
    for location in locations:
        if "main" in location.name.lower():
            return location
    if not locations:
        raise ValidationError("No inventory location found. Create a main inventory location first.")
    return locations[0]


async def _resolve_location(name: Optional[str], default: InventoryLocation) -> InventoryLocation:
    if not name:
        return default
    location = await InventoryLocation.filter(name__iexact=name, is_active=True).order_by("id").first()
    if not location:
        raise NotFoundError(f"Location {name} not found.")
    return location


async def _import_record(record: ImportRecord, default: InventoryLocation, result: ImportResult, user_id):
    quantity = parse_number(record.quantity)
    if quantity is None:
        raise ValidationError(f"Invalid quantity {record.quantity!r}.")
    if quantity != quantity.to_integral_value():
        raise ValidationError(f"Quantity must be a whole number, got {record.quantity}.")
    if quantity < 0:
        raise ValidationError(f"Quantity cannot be negative, got {record.quantity}.")
    counted = int(quantity)

    location = await _resolve_location(record.location, default)
    unit_price = parse_number(record.unit_price)

    component = await Component.get_or_none(component_number=record.part_number)
    if not component:
        component = await create_component(
            {
                "component_number": record.part_number,
                "description": record.description or record.part_number,
                "category": record.category or DEFAULT_CATEGORY,
                "supplier": record.supplier,
                "unit_price": unit_price,
            },
            user_id,
        )
        result.created += 1
        result.new_components.append(record.part_number)

    item = await InventoryItem.get_or_none(component_id=component.id, location_id=location.id)
    difference = counted - (item.quantity if item else 0)
    if difference > 0:
        notes = f"Inventory import - added {difference} units" if item else "Initial inventory import"
        await add_stock(component.id, location.id, difference, notes=notes, user_id=user_id)
    elif difference < 0:
        notes = f"Inventory import - removed {-difference} units"
        await consume_stock(component.id, location.id, -difference, notes=notes, user_id=user_id)
    else:
        result.skipped += 1
        return

    result.updated += 1
    result.updated_components.append(record.part_number)
    if unit_price and counted:
        result.total_value += unit_price * counted


async def import_inventory(
    records: List[ImportRecord],
    location_id: Optional[int] = None,
    skip_zero_quantity: bool = False,
    user_id: Optional[int] = None,
) -> ImportResult:
    """
    Applies parsed records row by row. A rejected row is reported in
    `errors` and does not stop the rest of the import.
    """
    if location_id is not None:
        default = await InventoryLocation.get_or_none(id=location_id)
        if not default:
            raise NotFoundError(f"Location {location_id} not found.")
    else:
        default = await _default_location()

    result = ImportResult()
    for record in records:
        result.processed += 1
        if skip_zero_quantity and (parse_number(record.quantity) or 0) <= 0:
            result.skipped += 1
            continue

        raw_part_number = record.part_number
        record.part_number = clean_part_number(raw_part_number)
        if not record.part_number:
            result.errors.append(ImportRowError(record.row, raw_part_number, "Invalid or empty part number"))
            continue

        try:
            await _import_record(record, default, result, user_id)
        except InventoryError as e:
            result.errors.append(ImportRowError(record.row, raw_part_number, e.message))
            log.info(f"Import row {record.row} ({raw_part_number}) rejected: {e.message}")

    result.success = len(result.errors) < result.processed
    log.info(
        f"Inventory import finished: {result.created} created, {result.updated} updated, "
        f"{result.skipped} skipped, {len(result.errors)} errors"
    )
    return result


def import_template_csv() -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(TEMPLATE_ROWS[0]))
    writer.writeheader()
    writer.writerows(TEMPLATE_ROWS)
    return buffer.getvalue()
