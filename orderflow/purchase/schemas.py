"""
Pydantic schemas for the Purchase service.
"""
from typing import List
from uuid import UUID
from pydantic import BaseModel, Field

from ..orders.schemas import MAX_ORDER_LINES, OrderBase, OrderItem, OrderLine


class PurchaseOrderCreate(BaseModel):
    """Schema for creating a purchase order."""
    vendor_id: UUID = Field(..., description="Vendor ID from the Contact service")
    items: List[OrderLine] = Field(..., min_length=1, max_length=MAX_ORDER_LINES)


class PurchaseOrder(OrderBase):
    vendor_id: str


class PurchaseOrderWithItems(PurchaseOrder):
    items: List[OrderItem] = []
