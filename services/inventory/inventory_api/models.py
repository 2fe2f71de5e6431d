"""
SQLAlchemy ORM models for the Inventory service.

Defines the database schema for inventory items and their stock ledger.
"""
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Text, Enum
from .database import Base


class TransactionType(str, enum.Enum):
    """Direction of a stock movement."""
    IN = "In"
    OUT = "Out"


class InventoryItem(Base):
    """
    Inventory item model representing a product in stock.
    
    Attributes:
        id (int): Primary key, auto-incremented inventory item ID
        name (str): Item name (at most 100 characters)
        description (str): Free-form description (optional)
        quantity (int): Quantity currently in stock
        min_stock_threshold (int): Item is low stock when quantity drops below this value
        price (Decimal): Unit price with two fractional digits
        created_date (datetime): Timestamp when the item was created
    """
    __tablename__ = "inventory_items"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    min_stock_threshold = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(18, 2), nullable=False)
    created_date = Column(DateTime, default=datetime.utcnow, nullable=False)

    @property
    def is_low_stock(self) -> bool:
        return self.quantity < self.min_stock_threshold

    def __repr__(self):
        return f"<InventoryItem(id={self.id}, name='{self.name}', quantity={self.quantity})>"


class StockTransaction(Base):
    """
    StockTransaction model representing one entry in an item's stock ledger.

    Rows are written once per stock adjustment and never updated.
    
    Attributes:
        id (int): Primary key, auto-incrementing transaction ID
        inventory_item_id (int): Foreign key to the inventory item
        type (TransactionType): "In" or "Out"
        quantity (int): Magnitude of the adjustment
        transaction_date (datetime): Timestamp when the adjustment was recorded
        notes (str): Free-form notes (optional)
    """
    __tablename__ = "stock_transactions"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    inventory_item_id = Column(Integer, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(
        Enum(TransactionType, name="transaction_type", native_enum=False, length=3,
             values_callable=lambda enum_cls: [member.value for member in enum_cls]),
        nullable=False,
    )
    quantity = Column(Integer, nullable=False)
    transaction_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    notes = Column(Text, nullable=True)
