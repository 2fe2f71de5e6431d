"""
Persistence gateway for the Inventory service.

InventoryRepository wraps a single SQLAlchemy session and is the only place
that queries the database. Writes go through unit_of_work(), which commits
everything added inside the block or rolls all of it back.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional
from fastapi import Depends
from sqlalchemy import delete as sqla_delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .database import get_db
from .errors import PersistenceError

logger = logging.getLogger(__name__)


class InventoryRepository:
    """Storage of inventory items and their stock transactions."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def unit_of_work(self) -> Iterator[Session]:
        """
        Commit all changes made inside the block as one transaction.

        Any exception rolls the session back. Database errors are re-raised as
        PersistenceError; anything else (domain errors included) propagates as is.
        """
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Rolling back unit of work after database error")
            raise PersistenceError(f"Database error: {e}") from e
        except Exception:
            self.db.rollback()
            raise

    def list_items(self) -> List[models.InventoryItem]:
        return self.db.query(models.InventoryItem).order_by(models.InventoryItem.name).all()

    def get_item(self, item_id: int, lock: bool = False) -> Optional[models.InventoryItem]:
        """
        Retrieve a single inventory item by ID.

        Args:
            item_id: ID of the inventory item to retrieve
            lock: Load the row with SELECT ... FOR UPDATE so concurrent
                stock adjustments on the same item run one after another

        Returns:
            InventoryItem object or None if not found
        """
        return self.item_query(item_id, lock=lock).first()

    def item_query(self, item_id: int, lock: bool = False):
        query = self.db.query(models.InventoryItem).filter(models.InventoryItem.id == item_id)
        if lock:
            # Re-read the locked row even if the item is already in the session
            query = query.with_for_update().populate_existing()
        return query

    def list_low_stock(self) -> List[models.InventoryItem]:
        return (
            self.db.query(models.InventoryItem)
            .filter(models.InventoryItem.quantity < models.InventoryItem.min_stock_threshold)
            .order_by(models.InventoryItem.quantity)
            .all()
        )

    def list_transactions(self, item_id: int) -> List[models.StockTransaction]:
        return (
            self.db.query(models.StockTransaction)
            .filter(models.StockTransaction.inventory_item_id == item_id)
            .order_by(models.StockTransaction.transaction_date.desc(), models.StockTransaction.id.desc())
            .all()
        )

    def add(self, obj) -> None:
        self.db.add(obj)

    def delete_item(self, item: models.InventoryItem) -> None:
        # Remove the item's ledger first so the foreign key holds on backends
        # that do not enforce ON DELETE CASCADE
        self.db.execute(
            sqla_delete(models.StockTransaction).where(models.StockTransaction.inventory_item_id == item.id)
        )
        self.db.flush()
        self.db.delete(item)

    def refresh(self, obj) -> None:
        self.db.refresh(obj)


def get_repository(db: Session = Depends(get_db)) -> InventoryRepository:
    """FastAPI dependency providing a repository bound to the request's session."""
    return InventoryRepository(db)
