"""
CRUD (Create, Read, Update, Delete) operations for the Inventory service.

This module contains all database operations for items and their stock.
"""
import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import BadRequestError, ConflictError, NotFoundError, ServiceError, from_db_error
from . import models, schemas

logger = logging.getLogger(__name__)

def get_item(db: Session, item_id: str) -> Optional[models.Item]:
    """
    Retrieve a single item by ID.

    Args:
        db: Database session
        item_id: ID of the item to retrieve

    Returns:
        Item object or None if not found
    """
    return db.query(models.Item).filter(models.Item.id == item_id).first()

def get_item_by_sku(db: Session, sku: str) -> Optional[models.Item]:
    return db.query(models.Item).filter(models.Item.sku == sku.upper()).first()

def get_items(db: Session, skip: int = 0, limit: int = 100) -> List[models.Item]:
    """
    Retrieve a list of items with pagination, ordered by SKU.

    Args:
        db: Database session
        skip: Number of records to skip (offset)
        limit: Maximum number of records to return

    Returns:
        List of Item objects
    """
    return db.query(models.Item).order_by(models.Item.sku).offset(skip).limit(limit).all()

def create_item(db: Session, item: schemas.ItemCreate) -> models.Item:
    """
    Create a new item together with its stock row (quantity 0).

    Both rows are written in one transaction.

    Raises:
        ConflictError: the SKU is already in use
    """
    sku = item.sku.upper()
    if get_item_by_sku(db, sku) is not None:
        raise ConflictError(f"sku {sku} already exists")

    db_item = models.Item(
        name=item.name,
        description=item.description,
        sku=sku,
        unit_price=item.unit_price,
    )
    db_item.stock = models.Stock(quantity=0)
    try:
        db.add(db_item)
        db.commit()
        db.refresh(db_item)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create item {sku}: {e}")
        raise from_db_error(e)
    return db_item

def update_item(db: Session, item_id: str, item: schemas.ItemUpdate) -> Optional[models.Item]:
    """
    Update an existing item. Stock is not touched.

    Args:
        db: Database session
        item_id: ID of the item to update
        item: Updated item data (only provided fields will be updated)

    Returns:
        Updated Item object or None if not found
    """
    db_item = get_item(db, item_id)
    if db_item is None:
        return None

    update_data = item.model_dump(exclude_unset=True)
    if update_data.get("sku"):
        update_data["sku"] = update_data["sku"].upper()
    for key, value in update_data.items():
        setattr(db_item, key, value)

    try:
        db.commit()
        db.refresh(db_item)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update item {item_id}: {e}")
        raise from_db_error(e)
    return db_item

def delete_item(db: Session, item_id: str) -> bool:
    """
    Delete an item and its stock row.

    Returns:
        True if item was deleted, False if not found
    """
    db_item = get_item(db, item_id)
    if db_item is None:
        return False

    try:
        db.delete(db_item)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete item {item_id}: {e}")
        raise from_db_error(e)
    return True

def get_stock(db: Session, item_id: str) -> Optional[models.Stock]:
    return db.query(models.Stock).filter(models.Stock.item_id == item_id).first()

def adjust_stock(db: Session, item_id: str, delta: int) -> models.Stock:
    """
    Add ``delta`` (possibly negative) to an item's stock.

    The stock row is locked until commit, so concurrent adjustments of the
    same item are serialized and each sees the previous one's result.

    Args:
        db: Database session
        item_id: ID of the item whose stock changes
        delta: Signed quantity change

    Returns:
        The updated Stock object

    Raises:
        NotFoundError: the item has no stock row
        BadRequestError: the result would be negative; stock is unchanged
    """
    try:
        stock = (
            db.query(models.Stock)
            .filter(models.Stock.item_id == item_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if stock is None:
            raise NotFoundError("stock not found")

        new_quantity = stock.quantity + delta
        if new_quantity < 0:
            raise BadRequestError(
                f"insufficient stock for item {item_id}: have {stock.quantity}, change {delta}"
            )

        stock.quantity = new_quantity
        stock.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(stock)
    except ServiceError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to adjust stock for item {item_id}: {e}")
        raise from_db_error(e)
    return stock
