from enum import Enum
from tortoise import fields, models

from app.core.config import DEFAULT_MIN_STOCK_LEVEL


class TransactionType(str, Enum):
    ADD = "add"
    REMOVE = "remove"  # Legacy synonym of CONSUME, still accepted when replaying the ledger
    TRANSFER = "transfer"
    CONSUME = "consume"


class InventoryItem(models.Model):
    """
    Current stock for one (component, location) pair. Only the transaction
    engine changes `quantity`.
    """
    id = fields.IntField(primary_key=True)
    component = fields.ForeignKeyField("models.Component", related_name="inventory_items", on_delete=fields.RESTRICT)
    location = fields.ForeignKeyField("models.InventoryLocation", related_name="inventory_items", on_delete=fields.RESTRICT)
    quantity = fields.IntField(default=0)
    min_stock_level = fields.IntField(default=DEFAULT_MIN_STOCK_LEVEL) # For low stock alert
    last_updated = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "inventory_items"
        unique_together = (("component", "location"),)
        indexes = [
            ("location_id",),
        ]

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_stock_level


class InventoryTransaction(models.Model):
    """Append-only ledger entry. Rows are never updated or deleted."""
    id = fields.IntField(primary_key=True)
    component = fields.ForeignKeyField("models.Component", related_name="transactions", on_delete=fields.RESTRICT)
    from_location = fields.ForeignKeyField(
        "models.InventoryLocation", related_name="transactions_from", null=True, on_delete=fields.RESTRICT
    )
    to_location = fields.ForeignKeyField(
        "models.InventoryLocation", related_name="transactions_to", null=True, on_delete=fields.RESTRICT
    )
    quantity = fields.IntField()
    transaction_type = fields.CharEnumField(TransactionType, max_length=20)
    notes = fields.TextField(null=True)
    created_by = fields.IntField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "inventory_transactions"
        indexes = [
            ("component_id",),
            ("transaction_type",),
            ("created_at",),
            ("component_id", "created_at"),  # Ledger replay per component
        ]
