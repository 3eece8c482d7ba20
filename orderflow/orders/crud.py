"""
Database operations shared by the sales and purchase order services.

Functions take the service's ORM classes as arguments so one implementation
serves both ``sales_orders`` and ``purchase_orders``. Every write happens in a
single transaction: an order is never visible without its items.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import BadRequestError, NotFoundError, ServiceError, from_db_error

logger = logging.getLogger(__name__)


def get_order(db: Session, order_model, order_id: str):
    """
    Retrieve a single order (with its items) by ID.

    Args:
        db: Database session
        order_model: ORM class of the order table
        order_id: ID of the order to retrieve

    Returns:
        Order object or None if not found
    """
    return db.query(order_model).filter(order_model.id == order_id).first()


def get_orders(db: Session, order_model, skip: int = 0, limit: int = 100,
               status: Optional[str] = None) -> List:
    """
    Retrieve orders with pagination, newest first.

    Args:
        db: Database session
        order_model: ORM class of the order table
        skip: Number of records to skip (offset)
        limit: Maximum number of records to return
        status: Only return orders in this status, if given

    Returns:
        List of order objects
    """
    query = db.query(order_model)
    if status is not None:
        query = query.filter(order_model.status == status)
    return query.order_by(order_model.created_at.desc()).offset(skip).limit(limit).all()


def create_order(db: Session, order, items: List):
    """
    Persist an order and all of its items in one transaction.

    NOTE: This function assumes validation and pricing have already been performed.

    Args:
        db: Database session
        order: New order object
        items: New item objects belonging to ``order``

    Returns:
        The persisted order

    Raises:
        ConflictError: a unique constraint was violated
        InternalError: any other persistence failure
    """
    order.items = items
    try:
        db.add(order)
        db.commit()
        db.refresh(order)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create order {order.id}: {e}")
        raise from_db_error(e)
    return order


def replace_order_items(db: Session, order_model, order_id: str, draft_status: str,
                        items: List, total_amount: Decimal):
    """
    Replace every item of a Draft order and recompute its total.

    The order row is locked for the duration of the transaction and its status
    re-checked, so a concurrent confirmation cannot interleave with the replace.

    Args:
        db: Database session
        order_model: ORM class of the order table
        order_id: ID of the order to update
        draft_status: Status in which item replacement is allowed
        items: New item objects
        total_amount: Sum of the new items' subtotals

    Returns:
        The updated order

    Raises:
        NotFoundError: the order does not exist
        BadRequestError: the order is no longer in ``draft_status``
    """
    try:
        order = (
            db.query(order_model)
            .filter(order_model.id == order_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if order is None:
            raise NotFoundError("order not found")
        if order.status != draft_status:
            raise BadRequestError(f"only {draft_status} orders can be updated (order is {order.status})")

        # delete-orphan cascade removes the previous items
        order.items = items
        order.total_amount = total_amount
        order.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(order)
    except ServiceError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to replace items of order {order_id}: {e}")
        raise from_db_error(e)
    return order


def transition_order_status(db: Session, order_model, order_id: str, from_status: str, to_status: str):
    """
    Move an order from ``from_status`` to ``to_status``.

    The update is conditional on the current status, so two concurrent
    transitions of the same order cannot both succeed.

    Returns:
        The updated order

    Raises:
        NotFoundError: the order does not exist
        BadRequestError: the order is not in ``from_status``; it is left unchanged
    """
    try:
        updated = (
            db.query(order_model)
            .filter(order_model.id == order_id, order_model.status == from_status)
            .update(
                {order_model.status: to_status, order_model.updated_at: datetime.utcnow()},
                synchronize_session=False,
            )
        )
        db.commit()
        order = get_order(db, order_model, order_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to move order {order_id} to {to_status}: {e}")
        raise from_db_error(e)

    if order is None:
        raise NotFoundError("order not found")
    if updated == 0:
        raise BadRequestError(f"order must be {from_status} to become {to_status} (order is {order.status})")
    return order
