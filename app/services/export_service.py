"""
Reporting exports (BI tools, spreadsheets) built from the read-side queries.
"""
import csv
import io
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from app.core.errors import ValidationError
from app.services.inventory_service import get_dashboard_stats, get_inventory, get_low_stock, get_recent_transactions

DASHBOARD_TRANSACTIONS = 50
CSV_TRANSACTIONS = 100

INVENTORY_HEADER = [
    "Component Number", "Description", "Location", "Quantity", "Min Stock Level",
    "Category", "Supplier", "Unit Price", "Last Updated",
]
TRANSACTIONS_HEADER = ["ID", "Component Number", "Type", "Quantity", "From Location", "To Location", "Timestamp", "Notes"]


def _location_name(location) -> Optional[str]:
    return location.name if location else None


async def build_dashboard_export(now: Optional[datetime] = None) -> Dict:
    """Snapshot of stats, stock, recent activity and low stock alerts."""
    now = now or datetime.now(timezone.utc)
    inventory = await get_inventory()
    transactions = await get_recent_transactions(DASHBOARD_TRANSACTIONS)
    low_stock = await get_low_stock()

    return {
        "timestamp": now.isoformat(),
        "summary": await get_dashboard_stats(),
        "inventory": [
            {
                "componentNumber": item.component.component_number,
                "description": item.component.description,
                "location": item.location.name,
                "quantity": item.quantity,
                "minStockLevel": item.min_stock_level,
                "category": item.component.category,
                "supplier": item.component.supplier,
                "unitPrice": str(item.component.unit_price) if item.component.unit_price is not None else None,
                "lastUpdated": item.last_updated.isoformat(),
            }
            for item in inventory
        ],
        "transactions": [
            {
                "id": txn.id,
                "componentNumber": txn.component.component_number,
                "type": txn.transaction_type.value,
                "quantity": txn.quantity,
                "fromLocation": _location_name(txn.from_location),
                "toLocation": _location_name(txn.to_location),
                "timestamp": txn.created_at.isoformat(),
                "notes": txn.notes,
            }
            for txn in transactions
        ],
        "alerts": [
            {
                "componentNumber": item.component.component_number,
                "description": item.component.description,
                "location": item.location.name,
                "currentStock": item.quantity,
                "minStockLevel": item.min_stock_level,
                "urgency": "critical" if item.quantity == 0 else "warning",
            }
            for item in low_stock
        ],
    }


async def inventory_csv() -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(INVENTORY_HEADER)
    for item in await get_inventory():
        component = item.component
        writer.writerow([
            component.component_number,
            component.description,
            item.location.name,
            item.quantity,
            item.min_stock_level,
            component.category or "",
            component.supplier or "",
            component.unit_price if component.unit_price is not None else 0,
            item.last_updated.isoformat(),
        ])
    return buffer.getvalue()


async def transactions_csv(limit: int = CSV_TRANSACTIONS) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(TRANSACTIONS_HEADER)
    for txn in await get_recent_transactions(limit):
        writer.writerow([
            txn.id,
            txn.component.component_number,
            txn.transaction_type.value,
            txn.quantity,
            _location_name(txn.from_location) or "",
            _location_name(txn.to_location) or "",
            txn.created_at.isoformat(),
            txn.notes or "",
        ])
    return buffer.getvalue()


CSV_EXPORTS = {
    "inventory": inventory_csv,
    "transactions": transactions_csv,
}


async def export_csv(kind: str, now: Optional[datetime] = None) -> Tuple[str, str]:
    """Returns (filename, csv text) for an `inventory` or `transactions` export."""
    builder = CSV_EXPORTS.get(kind)
    if builder is None:
        raise ValidationError(f"Unknown export type {kind!r}.", details={"allowed": sorted(CSV_EXPORTS)})
    now = now or datetime.now(timezone.utc)
    return f"{kind}_export_{now.date().isoformat()}.csv", await builder()
