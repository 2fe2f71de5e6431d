"""
Domain errors raised by the Inventory service.

The HTTP layer in main.py translates these into responses.
"""


class InventoryError(Exception):
    """Base class for inventory service errors."""


class ItemNotFoundError(InventoryError):
    """The requested inventory item does not exist."""

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"Inventory item {item_id} not found")


class InsufficientStockError(InventoryError):
    """A stock-out asked for more units than the item holds."""

    def __init__(self, available: int, requested: int):
        self.available = available
        self.requested = requested
        super().__init__(f"Insufficient stock. Available: {available}")


class PersistenceError(InventoryError):
    """The database rejected or failed to commit a unit of work."""
