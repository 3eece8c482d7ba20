"""
Pydantic schemas shared by the sales and purchase order services.

Each service subclasses these to name its counterparty field
(``customer_id`` or ``vendor_id``).
"""
from datetime import datetime
from decimal import Decimal
from typing import List
from uuid import UUID

from pydantic import BaseModel, Field

MAX_ORDER_LINES = 100


class OrderLine(BaseModel):
    """Schema for one requested line: an inventory item and a quantity."""
    item_id: UUID = Field(..., description="Item ID from the Inventory service")
    quantity: int = Field(..., gt=0, description="Quantity ordered")


class OrderItemsUpdate(BaseModel):
    """Schema for replacing the lines of a Draft order."""
    items: List[OrderLine] = Field(..., min_length=1, max_length=MAX_ORDER_LINES)


class OrderItem(BaseModel):
    """
    Schema for a persisted, priced order line.

    Attributes:
        id (str): Line identifier
        order_id (str): Owning order
        item_id (str): Inventory item referenced by the line
        quantity (int): Quantity ordered
        unit_price (Decimal): Price captured when the order was validated
        subtotal (Decimal): quantity x unit_price
    """
    id: str
    order_id: str
    item_id: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderBase(BaseModel):
    """Base schema with the attributes common to sales and purchase orders."""
    id: str
    status: str
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
