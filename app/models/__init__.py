# app/models/__init__.py
from .catalog import Barcode, BarcodePurpose, Component
from .facility import Facility, InventoryLocation, LocationType
from .inventory import InventoryItem, InventoryTransaction, TransactionType
from .outbox import OutboxEvent
from .user import User, UserGroup, UserRole

# Export all models
__all__ = [
    "Barcode",
    "BarcodePurpose",
    "Component",
    "Facility",
    "InventoryItem",
    "InventoryLocation",
    "InventoryTransaction",
    "LocationType",
    "OutboxEvent",
    "TransactionType",
    "User",
    "UserGroup",
    "UserRole",
]
