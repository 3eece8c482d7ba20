"""
Pydantic schemas for request/response validation in the Contact service.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

class ContactBase(BaseModel):
    """Base schema with attributes common to customers and vendors."""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None

class ContactCreate(ContactBase):
    """Schema for creating a customer or vendor."""
    pass

class ContactUpdate(BaseModel):
    """Schema for updating a customer or vendor. All fields are optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None

class Contact(ContactBase):
    """
    Schema for customer and vendor responses.

    Attributes:
        id (str): Unique identifier
        created_at (datetime): When the record was created
        updated_at (datetime): When the record was last modified
    """
    id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
