"""
Credential checks for the Auth service.

Password hashing for users and pre-shared secret checks for services.
"""
import hmac
import logging
from typing import Optional
from passlib.context import CryptContext
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import config
from ..errors import ConflictError, from_db_error
from . import models, schemas

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against

    Returns:
        True if the password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def get_user(db: Session, user_id: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email.lower()).first()


def create_user(db: Session, user: schemas.UserRegister) -> models.User:
    """
    Create a new user with a hashed password.

    Raises:
        ConflictError: the email is already registered
    """
    email = user.email.lower()
    if get_user_by_email(db, email) is not None:
        raise ConflictError("email already registered")

    db_user = models.User(email=email, password_hash=get_password_hash(user.password), role=user.role)
    db.add(db_user)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create user {email}: {e}")
        raise from_db_error(e)
    db.refresh(db_user)
    return db_user


def authenticate_user(db: Session, email: str, password: str) -> Optional[models.User]:
    """
    Authenticate a user by email and password.

    Args:
        db: Database session
        email: User's email address
        password: Plain text password to verify

    Returns:
        User object if authentication succeeds, None otherwise
    """
    user = get_user_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def verify_service_secret(service_name: str, service_secret: str) -> bool:
    """
    Check a service's pre-shared secret.

    Only the known platform services may authenticate.
    """
    if service_name not in config.KNOWN_SERVICES:
        return False
    return hmac.compare_digest(service_secret.encode(), config.service_secret(service_name).encode())
