"""
Pydantic schemas for request/response validation in the Inventory service.

These schemas define the structure of data for API requests and responses.
Fields are exposed in camelCase on the wire; snake_case names are accepted on input too.
"""
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel, Field, PlainSerializer, StrictInt, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from .models import TransactionType

CENT = Decimal("0.01")
# Numeric(18, 2) holds at most 16 integer digits
PRICE_LIMIT = Decimal("1e16")


def _check_name(value: str) -> str:
    if not value.strip():
        raise ValueError("The Name field is required.")
    return value


def _round_price(value: Decimal) -> Decimal:
    try:
        rounded = value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError("Price is out of range")
    if abs(rounded) >= PRICE_LIMIT:
        raise ValueError("Price is out of range")
    return rounded


# Names must not be blank; prices are rounded to cents on input and rendered as JSON numbers
ItemName = Annotated[str, StringConstraints(max_length=100), AfterValidator(_check_name)]
Price = Annotated[
    Decimal,
    Field(gt=-PRICE_LIMIT, lt=PRICE_LIMIT),
    AfterValidator(_round_price),
    PlainSerializer(lambda value: float(value), return_type=float, when_used="json"),
]


class CamelModel(BaseModel):
    """Base schema that reads ORM objects and speaks camelCase JSON."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class InventoryItemBase(CamelModel):
    """Base schema with common inventory item attributes."""
    name: ItemName
    description: Optional[str] = None
    quantity: int
    min_stock_threshold: int
    price: Price


class InventoryItemCreate(InventoryItemBase):
    """Schema for creating a new inventory item."""
    pass


class InventoryItemUpdate(CamelModel):
    """
    Schema for updating an existing inventory item. All fields are optional.

    Only fields present in the request body are applied. Description may be
    cleared with null; the other fields may not.
    """
    name: Optional[ItemName] = None
    description: Optional[str] = None
    quantity: Optional[int] = None
    min_stock_threshold: Optional[int] = None
    price: Optional[Price] = None

    @field_validator("name", "quantity", "min_stock_threshold", "price")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("Field may not be null")
        return value


class InventoryItem(InventoryItemBase):
    """
    Schema for inventory item responses, includes all database fields.

    Attributes:
        id (int): Inventory item's unique identifier
        created_date (datetime): When the item was created
    """
    id: int
    created_date: datetime


class StockInRequest(CamelModel):
    """Request body for adding stock to an item."""
    quantity: StrictInt
    notes: Optional[str] = None


class StockOutRequest(CamelModel):
    """Request body for removing stock from an item."""
    quantity: StrictInt
    notes: Optional[str] = None


class StockInResult(CamelModel):
    message: str
    new_quantity: int
    is_low_stock: bool


class StockOutResult(CamelModel):
    message: str
    new_quantity: int
    low_stock_alert: str


class StockTransaction(CamelModel):
    """
    Schema for stock ledger entries.

    Attributes:
        id (int): Transaction ID
        inventory_item_id (int): Item the adjustment was applied to
        type (TransactionType): "In" or "Out"
        quantity (int): Magnitude of the adjustment
        transaction_date (datetime): When the adjustment was recorded
        notes (str): Free-form notes (optional)
    """
    id: int
    inventory_item_id: int
    type: TransactionType
    quantity: int
    transaction_date: datetime
    notes: Optional[str] = None
