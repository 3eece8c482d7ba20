"""
CRUD operations for the Contact service.

Customers and vendors are handled by the same functions; callers pass the
ORM class (``models.Customer`` or ``models.Vendor``).
"""
import logging
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import ConflictError, from_db_error
from . import schemas

logger = logging.getLogger(__name__)

def get_contact(db: Session, model, contact_id: str):
    """
    Retrieve a single customer or vendor by ID.

    Args:
        db: Database session
        model: ``models.Customer`` or ``models.Vendor``
        contact_id: ID of the record to retrieve

    Returns:
        The record or None if not found
    """
    return db.query(model).filter(model.id == contact_id).first()

def get_contact_by_email(db: Session, model, email: str):
    return db.query(model).filter(model.email == email.lower()).first()

def get_contacts(db: Session, model, skip: int = 0, limit: int = 100) -> List:
    return db.query(model).order_by(model.name).offset(skip).limit(limit).all()

def _commit(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action}: {e}")
        raise from_db_error(e)

def create_contact(db: Session, model, contact: schemas.ContactCreate):
    """
    Create a customer or vendor.

    Raises:
        ConflictError: the email is already used by another record of the same kind
    """
    email = contact.email.lower()
    if get_contact_by_email(db, model, email) is not None:
        raise ConflictError(f"email {email} already exists")

    db_contact = model(name=contact.name, email=email, phone=contact.phone, address=contact.address)
    db.add(db_contact)
    _commit(db, f"create {model.__tablename__} record")
    db.refresh(db_contact)
    return db_contact

def update_contact(db: Session, model, contact_id: str, contact: schemas.ContactUpdate) -> Optional[object]:
    """
    Update a customer or vendor.

    Args:
        db: Database session
        model: ``models.Customer`` or ``models.Vendor``
        contact_id: ID of the record to update
        contact: Updated data (only provided fields will be updated)

    Returns:
        Updated record or None if not found
    """
    db_contact = get_contact(db, model, contact_id)
    if db_contact is None:
        return None

    update_data = contact.model_dump(exclude_unset=True)
    if update_data.get("email"):
        update_data["email"] = update_data["email"].lower()
        existing = get_contact_by_email(db, model, update_data["email"])
        if existing is not None and existing.id != contact_id:
            raise ConflictError(f"email {update_data['email']} already exists")
    for key, value in update_data.items():
        setattr(db_contact, key, value)

    _commit(db, f"update {model.__tablename__} record {contact_id}")
    db.refresh(db_contact)
    return db_contact

def delete_contact(db: Session, model, contact_id: str) -> bool:
    db_contact = get_contact(db, model, contact_id)
    if db_contact is None:
        return False
    db.delete(db_contact)
    _commit(db, f"delete {model.__tablename__} record {contact_id}")
    return True
