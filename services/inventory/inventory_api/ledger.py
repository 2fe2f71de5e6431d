"""
Stock ledger operations for the Inventory service.

Every stock adjustment changes the item's quantity and appends a
StockTransaction in the same unit of work, so either both are stored or
neither is.
"""
import logging
from typing import List, Optional
from . import models, schemas
from .errors import InsufficientStockError, ItemNotFoundError
from .repository import InventoryRepository

logger = logging.getLogger(__name__)

LOW_STOCK_ALERT = "⚠️ Low stock alert!"
STOCK_OK = "Stock OK"


def _load_for_adjustment(repo: InventoryRepository, item_id: int) -> models.InventoryItem:
    item = repo.get_item(item_id, lock=True)
    if item is None:
        logger.warning(f"Stock adjustment requested for missing item {item_id}")
        raise ItemNotFoundError(item_id)
    return item


def stock_in(repo: InventoryRepository, item_id: int, quantity: int, notes: Optional[str] = None) -> schemas.StockInResult:
    """
    Add stock to an item and record an "In" transaction.

    The quantity is applied as given; its sign is not checked.

    Args:
        repo: Inventory repository
        item_id: ID of the inventory item
        quantity: Number of units received
        notes: Free-form notes stored on the transaction

    Returns:
        StockInResult with the new quantity and whether the item is still low stock

    Raises:
        ItemNotFoundError: If the item does not exist
        PersistenceError: If the commit fails; nothing is stored
    """
    with repo.unit_of_work():
        item = _load_for_adjustment(repo, item_id)
        item.quantity += quantity
        repo.add(models.StockTransaction(
            inventory_item_id=item_id,
            type=models.TransactionType.IN,
            quantity=quantity,
            notes=notes,
        ))
        new_quantity = item.quantity
        is_low_stock = item.is_low_stock

    logger.info(f"Stock in: item {item_id} +{quantity} -> {new_quantity}")
    return schemas.StockInResult(
        message="Stock added successfully",
        new_quantity=new_quantity,
        is_low_stock=is_low_stock,
    )


def stock_out(repo: InventoryRepository, item_id: int, quantity: int, notes: Optional[str] = None) -> schemas.StockOutResult:
    """
    Remove stock from an item and record an "Out" transaction.

    The low stock alert reflects the quantity left after the removal.

    Args:
        repo: Inventory repository
        item_id: ID of the inventory item
        quantity: Number of units taken out
        notes: Free-form notes stored on the transaction

    Returns:
        StockOutResult with the new quantity and a textual low stock alert

    Raises:
        ItemNotFoundError: If the item does not exist
        InsufficientStockError: If the item holds fewer units than requested;
            nothing is changed
        PersistenceError: If the commit fails; nothing is stored
    """
    with repo.unit_of_work():
        item = _load_for_adjustment(repo, item_id)
        if quantity > item.quantity:
            logger.warning(f"Insufficient stock for item {item_id}. Requested: {quantity}, Available: {item.quantity}")
            raise InsufficientStockError(available=item.quantity, requested=quantity)

        item.quantity -= quantity
        repo.add(models.StockTransaction(
            inventory_item_id=item_id,
            type=models.TransactionType.OUT,
            quantity=quantity,
            notes=notes,
        ))
        new_quantity = item.quantity
        is_low_stock = item.is_low_stock

    logger.info(f"Stock out: item {item_id} -{quantity} -> {new_quantity}")
    return schemas.StockOutResult(
        message="Stock removed successfully",
        new_quantity=new_quantity,
        low_stock_alert=LOW_STOCK_ALERT if is_low_stock else STOCK_OK,
    )


def list_transactions(repo: InventoryRepository, item_id: int) -> List[models.StockTransaction]:
    """
    Retrieve the stock ledger of an item, newest first.

    Returns an empty list when the item has no transactions or does not exist.
    """
    return repo.list_transactions(item_id)
