"""
SQLAlchemy ORM models for the Inventory service.

Defines the ``items`` catalog and the per-item ``stock`` counters.
"""
import uuid
from datetime import datetime
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from .database import Base


def new_id() -> str:
    return str(uuid.uuid4())


class Item(Base):
    """
    Catalog item that orders reference.

    Attributes:
        id (str): Primary key, UUID
        name (str): Display name
        description (str): Free text description (optional)
        sku (str): Stock Keeping Unit, unique and upper-cased
        unit_price (Decimal): Current price; orders snapshot it at validation time
        stock (Stock): Stock counter created together with the item
    """
    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint("unit_price >= 0", name="ck_items_unit_price"),
    )

    id = Column(String(36), primary_key=True, index=True, default=new_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    sku = Column(String(100), unique=True, nullable=False, index=True)
    unit_price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    stock = relationship("Stock", back_populates="item", uselist=False, cascade="all, delete-orphan")


class Stock(Base):
    """
    On-hand quantity of one item. Never negative.

    Changed only by signed deltas (manual adjustments and order events).
    """
    __tablename__ = "stock"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_stock_quantity"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    item_id = Column(String(36), ForeignKey("items.id", ondelete="CASCADE"), unique=True, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    item = relationship("Item", back_populates="stock")
