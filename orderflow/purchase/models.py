"""
SQLAlchemy ORM models for the Purchase service.

Defines the ``purchase_orders`` and ``purchase_order_items`` tables.
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from .database import Base


class PurchaseOrderStatus(str, Enum):
    DRAFT = "Draft"
    RECEIVED = "Received"
    PAID = "Paid"


class PurchaseOrder(Base):
    """
    Purchase order placed with a vendor.

    Attributes:
        id (str): Primary key, UUID
        vendor_id (str): Vendor ID from the Contact service
        status (str): Draft, Received or Paid
        total_amount (Decimal): Sum of the item subtotals
        items (list): Priced order lines, in request order
    """
    __tablename__ = "purchase_orders"
    __table_args__ = (
        CheckConstraint("status IN ('Draft', 'Received', 'Paid')", name="ck_purchase_orders_status"),
    )

    id = Column(String(36), primary_key=True, index=True)
    vendor_id = Column(String(36), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=PurchaseOrderStatus.DRAFT.value, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    items = relationship(
        "PurchaseOrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderItem.position",
        lazy="selectin",
    )


class PurchaseOrderItem(Base):
    """One priced line of a purchase order."""
    __tablename__ = "purchase_order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_purchase_order_items_quantity"),
    )

    id = Column(String(36), primary_key=True)
    order_id = Column(String(36), ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = Column(String(36), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    order = relationship("PurchaseOrder", back_populates="items")
