"""
Pydantic schemas for request/response validation in the Inventory service.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

class ItemBase(BaseModel):
    """Base schema with common item attributes."""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    sku: str = Field(..., min_length=1, max_length=100)
    unit_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)

class ItemCreate(ItemBase):
    """Schema for creating a new item. Its stock starts at zero."""
    pass

class ItemUpdate(BaseModel):
    """Schema for updating an existing item. All fields are optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    sku: Optional[str] = Field(None, min_length=1, max_length=100)
    unit_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)

class Item(ItemBase):
    """
    Schema for item responses, includes all database fields.

    Attributes:
        id (str): Item's unique identifier
        created_at (datetime): When the item was created
        updated_at (datetime): When the item was last modified
    """
    id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class StockAdjust(BaseModel):
    """Signed quantity change: positive adds stock, negative removes it."""
    quantity: int

class Stock(BaseModel):
    id: str
    item_id: str
    quantity: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
