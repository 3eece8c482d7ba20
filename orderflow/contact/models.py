"""
SQLAlchemy ORM models for the Contact service.

Customers and vendors share the same shape but live in separate tables.
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, String, Text
from .database import Base


def new_id() -> str:
    return str(uuid.uuid4())


class ContactMixin:
    """
    Columns common to customers and vendors.

    Attributes:
        id (str): Primary key, UUID
        name (str): Display name
        email (str): Contact email, unique within its table
        phone (str): Phone number (optional)
        address (str): Postal address (optional)
    """
    id = Column(String(36), primary_key=True, index=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Customer(ContactMixin, Base):
    """Customer that sales orders are placed by."""
    __tablename__ = "customers"


class Vendor(ContactMixin, Base):
    """Vendor that purchase orders are placed with."""
    __tablename__ = "vendors"
