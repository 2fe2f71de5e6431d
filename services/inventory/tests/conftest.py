from __future__ import annotations

import os
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"

from inventory_api import models  # noqa: E402
from inventory_api.database import Base, get_db  # noqa: E402
from inventory_api.main import app  # noqa: E402
from inventory_api.repository import InventoryRepository  # noqa: E402


@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def repo(db_session):
    return InventoryRepository(db_session)


@pytest.fixture()
def client(db_session):
    app.dependency_overrides[get_db] = lambda: db_session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_item(db_session):
    def _make_item(name="Widget", quantity=10, min_stock_threshold=5, price="9.99", description=None):
        item = models.InventoryItem(
            name=name,
            description=description,
            quantity=quantity,
            min_stock_threshold=min_stock_threshold,
            price=Decimal(price),
        )
        db_session.add(item)
        db_session.commit()
        db_session.refresh(item)
        return item

    return _make_item
