"""
Inventory Service API

Owns the item catalog and per-item stock. Order services read items from here
to validate and price order lines; stock is adjusted manually or by consuming
``sales.order.confirmed`` / ``purchase.order.received`` events.

Endpoints:
    GET /items: List items with pagination
    GET /items/{item_id}: Get a single item
    POST /items: Create an item (its stock starts at 0)
    PUT /items/{item_id}: Update an item
    DELETE /items/{item_id}: Delete an item and its stock
    GET /items/{item_id}/stock: Get an item's stock
    PUT /items/{item_id}/stock: Adjust an item's stock by a signed delta
    GET /healthz: Health check endpoint for orchestration systems
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import List
from uuid import UUID

from fastapi import Depends, FastAPI, Query, status
from sqlalchemy.orm import Session

from .. import config
from ..errors import NotFoundError
from ..health import check_health
from ..responses import Envelope, register_error_handlers
from ..security import (
    ROLE_FINANCE_MANAGER,
    ROLE_INVENTORY_MANAGER,
    RequestContext,
    require_context,
    require_roles,
)
from . import crud, models, schemas
from .database import SessionLocal, engine, get_db
from .subscriber import run_subscriber

config.configure_logging()
logger = logging.getLogger(__name__)

require_manager = require_roles(ROLE_INVENTORY_MANAGER, ROLE_FINANCE_MANAGER)
require_finance = require_roles(ROLE_FINANCE_MANAGER)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and consume order events in the background while the app runs."""
    models.Base.metadata.create_all(bind=engine)
    shutdown_event = asyncio.Event()
    subscriber_task = asyncio.create_task(
        run_subscriber(config.REDIS_URL, SessionLocal, shutdown_event)
    )
    yield
    shutdown_event.set()
    subscriber_task.cancel()
    try:
        await subscriber_task
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.exception("Order event subscriber stopped with an error")


app = FastAPI(title="inventory-service", lifespan=lifespan)
register_error_handlers(app)


@app.get("/healthz")
def health(db: Session = Depends(get_db)):
    """
    Health check endpoint for the inventory service.

    Returns:
        200 when the database is reachable, 503 otherwise
    """
    return check_health("inventory", db)

@app.get("/items", response_model=Envelope[List[schemas.Item]])
def list_items(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_context)
):
    """
    List items with pagination.

    Args:
        skip: Number of records to skip (default: 0)
        limit: Maximum number of records to return (default: 100)
        db: Database session (injected)
        context: Caller credential (injected)
    """
    items = crud.get_items(db, skip=skip, limit=limit)
    return Envelope[List[schemas.Item]](data=[schemas.Item.model_validate(i) for i in items])

@app.get("/items/{item_id}", response_model=Envelope[schemas.Item])
def get_item(
    item_id: UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_context)
):
    """
    Get a single item by ID. Order services call this to price order lines.

    Raises:
        NotFoundError: If the item doesn't exist
    """
    db_item = crud.get_item(db, str(item_id))
    if db_item is None:
        raise NotFoundError("item not found")
    return Envelope[schemas.Item](data=schemas.Item.model_validate(db_item))

@app.post("/items", response_model=Envelope[schemas.Item], status_code=status.HTTP_201_CREATED)
def create_item(
    item: schemas.ItemCreate,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_manager)
):
    """
    Create a new item and its zero-quantity stock row.

    Raises:
        ConflictError: If the SKU is already in use
    """
    db_item = crud.create_item(db, item)
    logger.info(f"Created item {db_item.id} ({db_item.sku})")
    return Envelope[schemas.Item](
        status=status.HTTP_201_CREATED,
        message="item created",
        data=schemas.Item.model_validate(db_item),
    )

@app.put("/items/{item_id}", response_model=Envelope[schemas.Item])
def update_item(
    item_id: UUID,
    item: schemas.ItemUpdate,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_manager)
):
    db_item = crud.update_item(db, str(item_id), item)
    if db_item is None:
        raise NotFoundError("item not found")
    return Envelope[schemas.Item](message="item updated", data=schemas.Item.model_validate(db_item))

@app.delete("/items/{item_id}", response_model=Envelope[None])
def delete_item(
    item_id: UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_finance)
):
    """Delete an item together with its stock. Requires the finance_manager role."""
    if not crud.delete_item(db, str(item_id)):
        raise NotFoundError("item not found")
    logger.info(f"Deleted item {item_id}")
    return Envelope[None](message="item deleted")

@app.get("/items/{item_id}/stock", response_model=Envelope[schemas.Stock])
def get_stock(
    item_id: UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_context)
):
    stock = crud.get_stock(db, str(item_id))
    if stock is None:
        raise NotFoundError("stock not found")
    return Envelope[schemas.Stock](data=schemas.Stock.model_validate(stock))

@app.put("/items/{item_id}/stock", response_model=Envelope[schemas.Stock])
def adjust_stock(
    item_id: UUID,
    adjustment: schemas.StockAdjust,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_manager)
):
    """
    Adjust an item's stock by a signed delta.

    Raises:
        NotFoundError: If the item has no stock row
        BadRequestError: If the result would be negative (stock unchanged)
    """
    stock = crud.adjust_stock(db, str(item_id), adjustment.quantity)
    logger.info(f"Adjusted stock of item {item_id} by {adjustment.quantity:+d} to {stock.quantity}")
    return Envelope[schemas.Stock](message="stock updated", data=schemas.Stock.model_validate(stock))
