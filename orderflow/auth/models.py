"""
SQLAlchemy ORM models for the Auth service.
"""
import uuid
from datetime import datetime
from sqlalchemy import CheckConstraint, Column, DateTime, String
from .database import Base

class User(Base):
    """
    User model representing an operator of the platform.

    Attributes:
        id (str): Primary key, UUID
        email (str): User's email address (unique, lower-cased)
        password_hash (str): Hashed password
        role (str): inventory_manager or finance_manager
        created_at (datetime): Timestamp when the user was created
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('inventory_manager', 'finance_manager')", name="ck_users_role"),
    )

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
