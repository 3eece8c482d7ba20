"""
Contact Service API

Registry of customers (referenced by sales orders) and vendors (referenced by
purchase orders). Order services read from here to validate counterparties.

Endpoints (same shape for /customers and /vendors):
    GET /customers: List customers with pagination
    GET /customers/{customer_id}: Get a single customer
    POST /customers: Create a customer
    PUT /customers/{customer_id}: Update a customer
    DELETE /customers/{customer_id}: Delete a customer
    GET /healthz: Health check endpoint for orchestration systems
"""
import logging
from contextlib import asynccontextmanager
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, FastAPI, Query, status
from sqlalchemy.orm import Session

from .. import config
from ..errors import NotFoundError
from ..health import check_health
from ..responses import Envelope, register_error_handlers
from ..security import (
    ROLE_FINANCE_MANAGER,
    ROLE_INVENTORY_MANAGER,
    RequestContext,
    require_context,
    require_roles,
)
from . import crud, models, schemas
from .database import engine, get_db

config.configure_logging()
logger = logging.getLogger(__name__)

require_manager = require_roles(ROLE_INVENTORY_MANAGER, ROLE_FINANCE_MANAGER)
require_finance = require_roles(ROLE_FINANCE_MANAGER)


def contact_router(prefix: str, model, label: str) -> APIRouter:
    """
    Build the CRUD routes of one contact kind.

    Args:
        prefix: URL prefix ("/customers" or "/vendors")
        model: ORM class backing the routes
        label: Singular name used in messages ("customer" or "vendor")
    """
    router = APIRouter(prefix=prefix, tags=[prefix.strip("/")])

    @router.get("", response_model=Envelope[List[schemas.Contact]])
    def list_contacts(
        skip: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=100),
        db: Session = Depends(get_db),
        context: RequestContext = Depends(require_context)
    ):
        contacts = crud.get_contacts(db, model, skip=skip, limit=limit)
        return Envelope[List[schemas.Contact]](data=[schemas.Contact.model_validate(c) for c in contacts])

    @router.get("/{contact_id}", response_model=Envelope[schemas.Contact])
    def get_contact(
        contact_id: UUID,
        db: Session = Depends(get_db),
        context: RequestContext = Depends(require_context)
    ):
        """Get a single record by ID. Order services call this to validate counterparties."""
        db_contact = crud.get_contact(db, model, str(contact_id))
        if db_contact is None:
            raise NotFoundError(f"{label} not found")
        return Envelope[schemas.Contact](data=schemas.Contact.model_validate(db_contact))

    @router.post("", response_model=Envelope[schemas.Contact], status_code=status.HTTP_201_CREATED)
    def create_contact(
        contact: schemas.ContactCreate,
        db: Session = Depends(get_db),
        context: RequestContext = Depends(require_manager)
    ):
        db_contact = crud.create_contact(db, model, contact)
        logger.info(f"Created {label} {db_contact.id}")
        return Envelope[schemas.Contact](
            status=status.HTTP_201_CREATED,
            message=f"{label} created",
            data=schemas.Contact.model_validate(db_contact),
        )

    @router.put("/{contact_id}", response_model=Envelope[schemas.Contact])
    def update_contact(
        contact_id: UUID,
        contact: schemas.ContactUpdate,
        db: Session = Depends(get_db),
        context: RequestContext = Depends(require_manager)
    ):
        db_contact = crud.update_contact(db, model, str(contact_id), contact)
        if db_contact is None:
            raise NotFoundError(f"{label} not found")
        return Envelope[schemas.Contact](message=f"{label} updated", data=schemas.Contact.model_validate(db_contact))

    @router.delete("/{contact_id}", response_model=Envelope[None])
    def delete_contact(
        contact_id: UUID,
        db: Session = Depends(get_db),
        context: RequestContext = Depends(require_finance)
    ):
        if not crud.delete_contact(db, model, str(contact_id)):
            raise NotFoundError(f"{label} not found")
        logger.info(f"Deleted {label} {contact_id}")
        return Envelope[None](message=f"{label} deleted")

    return router


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create database tables
    models.Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(title="contact-service", lifespan=lifespan)
register_error_handlers(app)
app.include_router(contact_router("/customers", models.Customer, "customer"))
app.include_router(contact_router("/vendors", models.Vendor, "vendor"))


@app.get("/healthz")
def health(db: Session = Depends(get_db)):
    """Health check endpoint for the contact service."""
    return check_health("contact", db)
