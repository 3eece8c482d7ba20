"""
Pydantic schemas for request/response validation in the Auth service.
"""
from datetime import datetime
from typing import Literal
from pydantic import BaseModel, EmailStr, Field

Role = Literal["inventory_manager", "finance_manager"]

class UserRegister(BaseModel):
    """Schema for user registration with password."""
    email: EmailStr
    password: str = Field(..., min_length=8, description="Password must be at least 8 characters")
    role: Role

class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str

class User(BaseModel):
    """
    Schema for user responses, includes all database fields except password.

    Attributes:
        id (str): User's unique identifier
        email (str): User's email address
        role (str): User role
        created_at (datetime): When the user was created
    """
    id: str
    email: EmailStr
    role: str
    created_at: datetime

    class Config:
        from_attributes = True

class Token(BaseModel):
    """Schema for the login response."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: User

class ServiceTokenRequest(BaseModel):
    """Credentials a service presents to obtain a service-identity token."""
    service_name: str = Field(..., min_length=1)
    service_secret: str = Field(..., min_length=1)

class ServiceToken(BaseModel):
    """
    Service-identity token.

    Attributes:
        token (str): Signed JWT with ``type=service``
        expires_in (int): Lifetime in seconds
    """
    token: str
    expires_in: int
