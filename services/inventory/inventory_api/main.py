"""
    Inventory Service API

    This module implements a FastAPI-based service for tracking inventory items and
    the stock moving in and out of them, with PostgreSQL database persistence.

    The service exposes:
    - CRUD endpoints for inventory items, plus a low-stock listing
    - Stock endpoints: stock-in, stock-out and the per-item transaction ledger
    - Health endpoint: Provides service health status for monitoring and orchestration

    Request validation failures are answered with 400 and a per-field error map.
"""
from typing import List
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from . import config, crud, ledger, models, schemas
from .database import engine
from .errors import InsufficientStockError, ItemNotFoundError, PersistenceError
from .repository import InventoryRepository, get_repository

logging.basicConfig(level=config.LOG_LEVEL, format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Inventory Service starting up...")
    # Create database tables
    models.Base.metadata.create_all(bind=engine)
    logger.info("Database tables check complete.")
    yield
    logger.info("Inventory Service shutting down...")
    engine.dispose()

app = FastAPI(
    title="inventory-service",
    description="Backend API for Inventory and Asset Management System",
    version="1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Answer malformed requests with 400 and the messages grouped by field."""
    errors = {}
    for error in exc.errors():
        loc = [str(part) for part in error["loc"] if part not in ("body", "path", "query")]
        field = ".".join(loc) or "body"
        errors.setdefault(field, []).append(error["msg"])
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "title": "One or more validation errors occurred.",
            "status": status.HTTP_400_BAD_REQUEST,
            "errors": errors,
        },
    )


@app.exception_handler(PersistenceError)
async def persistence_exception_handler(request: Request, exc: PersistenceError):
    logger.error(f"Persistence failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "A database error occurred while processing the request"},
    )


@app.get("/", include_in_schema=False)
def root():
    """API information and entry points."""
    return {
        "name": "Inventory & Asset Management System API",
        "version": app.version,
        "status": "Running",
        "documentation": app.docs_url,
        "endpoints": {
            "inventory": "/items",
            "lowStock": "/items/low-stock",
            "stock": "/stock",
        },
        "description": app.description,
    }

@app.get("/healthz", response_model=dict)
def health():
    """
    Health check endpoint for the inventory service.

    This endpoint is typically used by orchestrators (like Kubernetes) or load balancers
    to determine if the service is running and ready to accept requests.

    Returns:
        dict: A dictionary containing the health status of the service.
            - status (str): "healthy" if the service is operational.

    Example:
        GET /healthz
        Response: {"status": "healthy"}
    """
    return {"status": "healthy"}

@app.get("/items", response_model=List[schemas.InventoryItem], tags=["Inventory"])
def list_inventory_items(repo: InventoryRepository = Depends(get_repository)):
    """
    List all inventory items ordered by name.

    Returns:
        List of inventory item objects
    """
    return crud.list_items(repo)

@app.get("/items/low-stock", response_model=List[schemas.InventoryItem], tags=["Inventory"])
def list_low_stock_items(repo: InventoryRepository = Depends(get_repository)):
    """
    List items whose quantity is below their minimum stock threshold.

    Returns:
        List of inventory item objects, lowest quantity first
    """
    return crud.list_low_stock(repo)

@app.get("/items/{item_id}", response_model=schemas.InventoryItem, tags=["Inventory"])
def get_inventory_item(item_id: int, repo: InventoryRepository = Depends(get_repository)):
    """
    Get a single inventory item by ID.

    Args:
        item_id: ID of the inventory item to retrieve
        repo: Inventory repository (injected)

    Returns:
        Inventory item object

    Raises:
        HTTPException: 404 if item not found
    """
    db_item = crud.get_item(repo, item_id=item_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return db_item

@app.post("/items", response_model=schemas.InventoryItem, status_code=status.HTTP_201_CREATED, tags=["Inventory"])
def create_inventory_item(
    item: schemas.InventoryItemCreate,
    response: Response,
    repo: InventoryRepository = Depends(get_repository)
):
    """
    Create a new inventory item.

    Args:
        item: Inventory item data to create
        response: Outgoing response, receives the Location header
        repo: Inventory repository (injected)

    Returns:
        Created inventory item object
    """
    db_item = crud.create_item(repo, item=item)
    response.headers["Location"] = app.url_path_for("get_inventory_item", item_id=db_item.id)
    return db_item

@app.put("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["Inventory"])
def update_inventory_item(
    item_id: int,
    item: schemas.InventoryItemUpdate,
    repo: InventoryRepository = Depends(get_repository)
):
    """
    Update an existing inventory item. Only the fields sent are changed.

    Args:
        item_id: ID of the inventory item to update
        item: Updated item data
        repo: Inventory repository (injected)

    Returns:
        None (204 No Content)

    Raises:
        HTTPException: 404 if item not found
    """
    db_item = crud.update_item(repo, item_id=item_id, item=item)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@app.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["Inventory"])
def delete_inventory_item(item_id: int, repo: InventoryRepository = Depends(get_repository)):
    """
    Delete an inventory item together with its stock transactions.

    Args:
        item_id: ID of the inventory item to delete
        repo: Inventory repository (injected)

    Returns:
        None (204 No Content)

    Raises:
        HTTPException: 404 if item not found
    """
    success = crud.delete_item(repo, item_id=item_id)
    if not success:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post("/stock/in/{item_id}", response_model=schemas.StockInResult, tags=["Stock"])
def stock_in(
    item_id: int,
    body: schemas.StockInRequest,
    repo: InventoryRepository = Depends(get_repository)
):
    """
    Add stock to an item and record the movement in its ledger.

    Raises:
        HTTPException: 404 if item not found
    """
    try:
        return ledger.stock_in(repo, item_id, body.quantity, body.notes)
    except ItemNotFoundError:
        raise HTTPException(status_code=404, detail="Item not found")

@app.post("/stock/out/{item_id}", response_model=schemas.StockOutResult, tags=["Stock"])
def stock_out(
    item_id: int,
    body: schemas.StockOutRequest,
    repo: InventoryRepository = Depends(get_repository)
):
    """
    Remove stock from an item and record the movement in its ledger.

    Raises:
        HTTPException: 404 if item not found, 400 if the item holds fewer units than requested
    """
    try:
        return ledger.stock_out(repo, item_id, body.quantity, body.notes)
    except ItemNotFoundError:
        raise HTTPException(status_code=404, detail="Item not found")
    except InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/stock/transactions/{item_id}", response_model=List[schemas.StockTransaction], tags=["Stock"])
def list_stock_transactions(item_id: int, repo: InventoryRepository = Depends(get_repository)):
    """
    List the stock transactions of an item, newest first. Empty if there are none.
    """
    return ledger.list_transactions(repo, item_id)


def run():
    """Console entry point: serve the API with Uvicorn."""
    uvicorn.run("inventory_api.main:app", host=config.APP_HOST, port=config.APP_PORT)
