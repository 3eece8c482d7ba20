"""
SQLAlchemy ORM models for the Sales service.

Defines the ``sales_orders`` and ``order_items`` tables.
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from .database import Base


class SalesOrderStatus(str, Enum):
    DRAFT = "Draft"
    CONFIRMED = "Confirmed"
    PAID = "Paid"


class SalesOrder(Base):
    """
    Sales order placed by a customer.

    Attributes:
        id (str): Primary key, UUID
        customer_id (str): Customer ID from the Contact service
        status (str): Draft, Confirmed or Paid
        total_amount (Decimal): Sum of the item subtotals
        items (list): Priced order lines, in request order
    """
    __tablename__ = "sales_orders"
    __table_args__ = (
        CheckConstraint("status IN ('Draft', 'Confirmed', 'Paid')", name="ck_sales_orders_status"),
    )

    id = Column(String(36), primary_key=True, index=True)
    customer_id = Column(String(36), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=SalesOrderStatus.DRAFT.value, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
        lazy="selectin",
    )


class OrderItem(Base):
    """
    One priced line of a sales order.

    ``unit_price`` is the item price observed when the order was validated and
    does not follow later price changes in Inventory.
    """
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity"),
    )

    id = Column(String(36), primary_key=True)
    order_id = Column(String(36), ForeignKey("sales_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = Column(String(36), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    order = relationship("SalesOrder", back_populates="items")
