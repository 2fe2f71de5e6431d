"""
CRUD (Create, Read, Update, Delete) operations for the Inventory service.

This module contains the inventory catalog: item management and the
low-stock query. Not-found is signalled with None/False so the API layer
can decide on the response.
"""
import logging
from typing import List, Optional
from . import models, schemas
from .repository import InventoryRepository

logger = logging.getLogger(__name__)


def list_items(repo: InventoryRepository) -> List[models.InventoryItem]:
    """
    Retrieve all inventory items ordered by name.

    Args:
        repo: Inventory repository

    Returns:
        List of InventoryItem objects
    """
    return repo.list_items()

def get_item(repo: InventoryRepository, item_id: int) -> Optional[models.InventoryItem]:
    """
    Retrieve a single inventory item by ID.

    Args:
        repo: Inventory repository
        item_id: ID of the inventory item to retrieve

    Returns:
        InventoryItem object or None if not found
    """
    return repo.get_item(item_id)

def create_item(repo: InventoryRepository, item: schemas.InventoryItemCreate) -> models.InventoryItem:
    """
    Create a new inventory item in the database.

    Args:
        repo: Inventory repository
        item: Validated inventory item data

    Returns:
        Created InventoryItem object with its assigned ID
    """
    db_item = models.InventoryItem(**item.model_dump())
    with repo.unit_of_work():
        repo.add(db_item)
    repo.refresh(db_item)
    logger.info(f"Created inventory item {db_item.id} '{db_item.name}' with quantity {db_item.quantity}")
    return db_item

def update_item(repo: InventoryRepository, item_id: int, item: schemas.InventoryItemUpdate) -> Optional[models.InventoryItem]:
    """
    Update an existing inventory item.

    Args:
        repo: Inventory repository
        item_id: ID of the inventory item to update
        item: Updated item data (only provided fields will be updated)

    Returns:
        Updated InventoryItem object or None if not found
    """
    with repo.unit_of_work():
        db_item = repo.get_item(item_id)
        if db_item is None:
            return None

        update_data = item.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(db_item, key, value)

    logger.info(f"Updated inventory item {item_id}: {sorted(update_data)}")
    return db_item

def delete_item(repo: InventoryRepository, item_id: int) -> bool:
    """
    Delete an inventory item and its stock transactions.

    Args:
        repo: Inventory repository
        item_id: ID of the inventory item to delete

    Returns:
        True if item was deleted, False if not found
    """
    with repo.unit_of_work():
        db_item = repo.get_item(item_id)
        if db_item is None:
            logger.warning(f"Attempted to delete non-existent inventory item {item_id}")
            return False
        repo.delete_item(db_item)

    logger.info(f"Deleted inventory item {item_id}")
    return True

def list_low_stock(repo: InventoryRepository) -> List[models.InventoryItem]:
    """
    Retrieve items whose quantity is below their minimum stock threshold.

    Args:
        repo: Inventory repository

    Returns:
        List of InventoryItem objects, lowest quantity first
    """
    return repo.list_low_stock()
