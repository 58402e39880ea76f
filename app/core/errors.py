class InventoryError(Exception):
    """
    Base class for every failure the inventory core reports to callers.
    `code` is the machine-readable kind returned in error responses.
    """
    code = "inventory_error"
    status_code = 400

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(InventoryError):
    """Malformed input, non-positive quantity, same source and destination."""
    code = "validation_error"
    status_code = 400


class NotFoundError(InventoryError):
    """Unknown component, location, barcode or other referenced row."""
    code = "not_found"
    status_code = 404


class InsufficientStockError(InventoryError):
    code = "insufficient_stock"
    status_code = 409

    def __init__(self, component_id: int, location_id: int, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for component {component_id} at location {location_id}. "
            f"Requested: {requested}, Available: {available}",
            details={
                "componentId": component_id,
                "locationId": location_id,
                "requested": requested,
                "available": available,
            },
        )
        self.requested = requested
        self.available = available


class ConflictError(InventoryError):
    """A concurrent write or a uniqueness rule prevented the operation."""
    code = "conflict"
    status_code = 409
