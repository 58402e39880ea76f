from decimal import Decimal

import pytest

from app.core.errors import NotFoundError, ValidationError
from app.models.catalog import Component
from app.models.inventory import InventoryItem, InventoryTransaction, TransactionType
from app.services.import_service import (
    ImportRecord,
    clean_part_number,
    import_inventory,
    map_headers,
    parse_number,
    read_inventory_file,
)
from app.services.inventory_service import audit_component
from app.services.transaction_service import add_stock

SHEET = (
    "Part Number,Item Description,Qty On Hand,Min Stock,Unit Cost,Vendor\n"
    "217520,351X119MM 2OZ BRIGADE,40,5,\"$1,250.00\",Brigade\n"
    ",orphan row without part,3,,,\n"
    "00217999,New felt,12,,2.50,\n"
)


def test_part_numbers_and_numbers_are_cleaned():
    assert clean_part_number(" 00ab-12.3 ") == "AB-123"
    assert clean_part_number("***") == ""
    assert parse_number("$1,250.00") == Decimal("1250.00")
    assert parse_number("n/a") is None
    assert parse_number("") is None


def test_header_variations_are_recognised():
    mapping = map_headers(["SKU Number", "Name", "Qty", "Min Stock", "Bin", "Type", "Brand", "Price", "Remarks"])

    assert mapping == {
        "SKU Number": "part_number",
        "Name": "description",
        "Qty": "quantity",
        "Bin": "location",
        "Type": "category",
        "Brand": "supplier",
        "Price": "unit_price",
        "Remarks": "notes",
    }


def test_csv_sheet_is_parsed_into_records():
    records = read_inventory_file("count.csv", SHEET.encode())

    assert [r.part_number for r in records] == ["217520", "00217999"]
    assert records[0].quantity == "40"
    assert records[0].unit_price == "$1,250.00"
    assert records[0].supplier == "Brigade"
    assert records[1].row == 4


def test_unreadable_files_are_rejected():
    with pytest.raises(ValidationError):
        read_inventory_file("count.pdf", b"%PDF")
    with pytest.raises(ValidationError):
        read_inventory_file("count.csv", b"")
    with pytest.raises(ValidationError):
        read_inventory_file("count.csv", b"Colour,Size\nred,4\n")


@pytest.mark.asyncio
async def test_import_creates_parts_and_reconciles_stock(component, location_a, location_b):
    await add_stock(component.id, location_a.id, 50)
    records = read_inventory_file("count.csv", SHEET.encode())

    result = await import_inventory(records, user_id=9)

    assert result.success is True
    assert (result.processed, result.created, result.updated, result.skipped) == (2, 1, 2, 0)
    assert result.errors == []
    assert result.new_components == ["217999"]
    assert result.total_value == Decimal("1250.00") * 40 + Decimal("2.50") * 12

    # Existing stock was counted down through a consume, new stock arrived through an add
    counted = await InventoryItem.get(component_id=component.id, location_id=location_a.id)
    assert counted.quantity == 40
    shortfall = await InventoryTransaction.filter(component_id=component.id).order_by("-id").first()
    assert shortfall.transaction_type == TransactionType.CONSUME
    assert shortfall.quantity == 10
    assert shortfall.created_by == 9

    created = await Component.get(component_number="217999")
    assert created.category == "General"
    assert (await InventoryItem.get(component_id=created.id)).location_id == location_a.id
    assert (await audit_component(created.id))["consistent"] is True


@pytest.mark.asyncio
async def test_row_errors_do_not_stop_the_import(component, location_a, location_b):
    records = [
        ImportRecord(row=2, part_number="217520", quantity="abc"),
        ImportRecord(row=3, part_number="217520", quantity="2.5"),
        ImportRecord(row=4, part_number="217520", quantity="4", location="Quarantine"),
        ImportRecord(row=5, part_number="%%%", quantity="4"),
        ImportRecord(row=6, part_number="217520", quantity="6", location="line inventory"),
    ]

    result = await import_inventory(records)

    assert result.success is True
    assert [(e.row, e.part_number) for e in result.errors] == [
        (2, "217520"), (3, "217520"), (4, "217520"), (5, "%%%"),
    ]
    assert result.errors[3].error == "Invalid or empty part number"
    assert result.updated == 1
    assert (await InventoryItem.get(component_id=component.id, location_id=location_b.id)).quantity == 6


@pytest.mark.asyncio
async def test_unchanged_and_zero_rows_are_skipped(component, location_a):
    await add_stock(component.id, location_a.id, 8)
    records = [
        ImportRecord(row=2, part_number="217520", quantity="8"),
        ImportRecord(row=3, part_number="217521", quantity="0"),
    ]

    result = await import_inventory(records, location_id=location_a.id, skip_zero_quantity=True)

    assert (result.processed, result.skipped, result.updated, result.created) == (2, 2, 0, 0)
    assert await InventoryTransaction.all().count() == 1
    assert not await Component.exists(component_number="217521")


@pytest.mark.asyncio
async def test_import_needs_a_location(component):
    with pytest.raises(ValidationError):
        await import_inventory([ImportRecord(row=2, part_number="217520", quantity="1")])

    with pytest.raises(NotFoundError):
        await import_inventory([], location_id=404)
