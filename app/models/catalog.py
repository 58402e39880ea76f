from enum import Enum
from tortoise import fields, models


class BarcodePurpose(str, Enum):
    TESTING = "testing"
    TRAINING = "training"
    DEMO = "demo"


class Component(models.Model):
    id = fields.IntField(primary_key=True)
    component_number = fields.CharField(max_length=50, unique=True)
    description = fields.TextField()
    category = fields.CharField(max_length=100, null=True)
    supplier = fields.CharField(max_length=255, null=True)
    unit_price = fields.DecimalField(max_digits=12, decimal_places=2, null=True)
    plate_number = fields.CharField(max_length=50, null=True)
    # Components are deactivated, never deleted, so the ledger keeps its references
    is_active = fields.BooleanField(default=True)
    created_by = fields.IntField(null=True)
    updated_by = fields.IntField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "components"
        indexes = [
            ("is_active",),
            ("category",),
        ]


class Barcode(models.Model):
    """
    An alias that resolves to a component when scanned. Temporary barcodes
    carry an expiry and count how often they were used.
    """
    id = fields.IntField(primary_key=True)
    barcode = fields.CharField(max_length=100, unique=True)
    component = fields.ForeignKeyField(
        "models.Component", related_name="barcodes", null=True, on_delete=fields.SET_NULL
    )
    is_temporary = fields.BooleanField(default=False)
    purpose = fields.CharEnumField(BarcodePurpose, null=True)
    description = fields.TextField(null=True)
    expires_at = fields.DatetimeField(null=True)
    is_active = fields.BooleanField(default=True)
    usage_count = fields.IntField(default=0)
    last_used_at = fields.DatetimeField(null=True)
    created_by = fields.IntField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "barcodes"
        indexes = [
            ("is_temporary", "is_active"),  # Temporary barcode listing and cleanup
            ("expires_at",),
        ]
