from enum import Enum
from tortoise import fields, models


class LocationType(str, Enum):
    WAREHOUSE = "warehouse"
    PRODUCTION = "production"
    STAGING = "staging"
    QUARANTINE = "quarantine"


class Facility(models.Model):
    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=255)
    code = fields.CharField(max_length=50, unique=True)
    description = fields.TextField(null=True)
    address = fields.TextField(null=True)
    city = fields.CharField(max_length=100, null=True)
    state = fields.CharField(max_length=50, null=True)
    zip_code = fields.CharField(max_length=20, null=True)
    country = fields.CharField(max_length=100, null=True)
    phone = fields.CharField(max_length=50, null=True)
    email = fields.CharField(max_length=255, null=True)
    is_active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "facilities"
        indexes = [
            ("is_active",),
        ]


class InventoryLocation(models.Model):
    id = fields.IntField(primary_key=True)
    facility = fields.ForeignKeyField("models.Facility", related_name="locations", on_delete=fields.RESTRICT)
    name = fields.CharField(max_length=100)
    description = fields.TextField(null=True)
    location_type = fields.CharEnumField(LocationType, default=LocationType.WAREHOUSE)
    # Optional physical addressing inside the facility
    aisle = fields.CharField(max_length=20, null=True)
    rack = fields.CharField(max_length=20, null=True)
    shelf = fields.CharField(max_length=20, null=True)
    bin = fields.CharField(max_length=20, null=True)
    capacity = fields.IntField(null=True)
    is_active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "inventory_locations"
        unique_together = (("facility", "name"),)
        indexes = [
            ("facility_id",),
            ("location_type",),
        ]
