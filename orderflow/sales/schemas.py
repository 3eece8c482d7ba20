"""
Pydantic schemas for the Sales service.
"""
from typing import List
from uuid import UUID
from pydantic import BaseModel, Field

from ..orders.schemas import MAX_ORDER_LINES, OrderBase, OrderItem, OrderLine


class SalesOrderCreate(BaseModel):
    """Schema for creating a sales order."""
    customer_id: UUID = Field(..., description="Customer ID from the Contact service")
    items: List[OrderLine] = Field(..., min_length=1, max_length=MAX_ORDER_LINES)


class SalesOrder(OrderBase):
    customer_id: str


class SalesOrderWithItems(SalesOrder):
    items: List[OrderItem] = []
