from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from inventory_api import ledger, models
from inventory_api.errors import InsufficientStockError, ItemNotFoundError, PersistenceError


def _transactions(db_session, item_id):
    return db_session.query(models.StockTransaction).filter_by(inventory_item_id=item_id).all()


def test_stock_in_adds_stock_and_records_transaction(repo, make_item, db_session):
    item = make_item(quantity=10, min_stock_threshold=5)

    result = ledger.stock_in(repo, item.id, 5, "Adding stock")

    assert result.new_quantity == 15
    assert result.is_low_stock is False
    assert result.message == "Stock added successfully"
    assert repo.get_item(item.id).quantity == 15

    transactions = _transactions(db_session, item.id)
    assert len(transactions) == 1
    assert transactions[0].type == models.TransactionType.IN
    assert transactions[0].quantity == 5
    assert transactions[0].notes == "Adding stock"


def test_stock_in_still_below_threshold_reports_low_stock(repo, make_item):
    item = make_item(quantity=1, min_stock_threshold=10)
    result = ledger.stock_in(repo, item.id, 3)
    assert result.new_quantity == 4
    assert result.is_low_stock is True


def test_stock_in_missing_item(repo):
    with pytest.raises(ItemNotFoundError):
        ledger.stock_in(repo, 999, 5)


def test_stock_in_does_not_validate_sign(repo, make_item, db_session):
    item = make_item(quantity=10)
    result = ledger.stock_in(repo, item.id, -3)
    assert result.new_quantity == 7
    assert _transactions(db_session, item.id)[0].quantity == -3


def test_stock_out_insufficient_stock_changes_nothing(repo, make_item, db_session):
    item = make_item(quantity=20)

    with pytest.raises(InsufficientStockError) as excinfo:
        ledger.stock_out(repo, item.id, 25)

    assert excinfo.value.available == 20
    assert excinfo.value.requested == 25
    assert str(excinfo.value) == "Insufficient stock. Available: 20"
    assert repo.get_item(item.id).quantity == 20
    assert _transactions(db_session, item.id) == []


def test_stock_out_below_threshold_raises_alert(repo, make_item, db_session):
    item = make_item(quantity=10, min_stock_threshold=5)

    result = ledger.stock_out(repo, item.id, 8, "Shipped")

    assert result.new_quantity == 2
    assert result.low_stock_alert == ledger.LOW_STOCK_ALERT
    assert result.message == "Stock removed successfully"

    transactions = _transactions(db_session, item.id)
    assert len(transactions) == 1
    assert transactions[0].type == models.TransactionType.OUT
    assert transactions[0].quantity == 8
    assert transactions[0].notes == "Shipped"


def test_stock_out_alert_uses_quantity_after_removal(repo, make_item):
    # 10 -> 5 with threshold 5: not below the threshold afterwards
    item = make_item(quantity=10, min_stock_threshold=5)
    assert ledger.stock_out(repo, item.id, 5).low_stock_alert == ledger.STOCK_OK
    # 5 -> 4: now below
    assert ledger.stock_out(repo, item.id, 1).low_stock_alert == ledger.LOW_STOCK_ALERT


def test_stock_out_entire_quantity(repo, make_item):
    item = make_item(quantity=7, min_stock_threshold=0)
    result = ledger.stock_out(repo, item.id, 7)
    assert result.new_quantity == 0
    assert result.low_stock_alert == ledger.STOCK_OK


def test_stock_out_missing_item(repo):
    with pytest.raises(ItemNotFoundError):
        ledger.stock_out(repo, 999, 1)


def test_failed_commit_leaves_no_partial_state(repo, make_item, db_session, monkeypatch):
    item = make_item(quantity=10)

    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "commit", failing_commit)
    with pytest.raises(PersistenceError):
        ledger.stock_in(repo, item.id, 5, "never stored")
    monkeypatch.undo()

    assert repo.get_item(item.id).quantity == 10
    assert _transactions(db_session, item.id) == []


def test_list_transactions_newest_first_and_filtered(repo, make_item, db_session):
    item = make_item(name="Tracked")
    other = make_item(name="Other")
    db_session.add_all([
        models.StockTransaction(inventory_item_id=item.id, type=models.TransactionType.IN, quantity=1,
                                transaction_date=datetime(2024, 1, 1, 9, 0)),
        models.StockTransaction(inventory_item_id=item.id, type=models.TransactionType.OUT, quantity=2,
                                transaction_date=datetime(2024, 3, 1, 9, 0)),
        models.StockTransaction(inventory_item_id=other.id, type=models.TransactionType.IN, quantity=3,
                                transaction_date=datetime(2024, 2, 1, 9, 0)),
        models.StockTransaction(inventory_item_id=item.id, type=models.TransactionType.IN, quantity=4,
                                transaction_date=datetime(2024, 2, 1, 9, 0)),
    ])
    db_session.commit()

    transactions = ledger.list_transactions(repo, item.id)

    assert [t.quantity for t in transactions] == [2, 4, 1]
    assert all(t.inventory_item_id == item.id for t in transactions)


def test_list_transactions_unknown_item_is_empty(repo):
    assert ledger.list_transactions(repo, 404) == []


def _postgres_sql(query) -> str:
    return str(query.statement.compile(dialect=postgresql.dialect()))


def test_locked_item_query_selects_for_update(repo):
    assert "FOR UPDATE" in _postgres_sql(repo.item_query(1, lock=True))
    assert "FOR UPDATE" not in _postgres_sql(repo.item_query(1))


@pytest.mark.parametrize("adjust", [ledger.stock_in, ledger.stock_out])
def test_stock_adjustments_lock_the_item(repo, make_item, monkeypatch, adjust):
    item = make_item(quantity=10)
    calls = []
    original_get_item = repo.get_item

    def recording_get_item(item_id, lock=False):
        calls.append(lock)
        return original_get_item(item_id, lock=lock)

    monkeypatch.setattr(repo, "get_item", recording_get_item)
    adjust(repo, item.id, 1)

    assert calls == [True]


def test_locked_read_refreshes_stale_session_state(repo, make_item, db_session):
    item = make_item(quantity=10)
    # Another writer changed the row behind this session's back
    db_session.execute(models.InventoryItem.__table__.update().values(quantity=3))

    assert repo.get_item(item.id, lock=True).quantity == 3
