"""
Purchase Service API

Manages purchase orders placed with vendors. Vendors are validated against the
Contact service and items are priced against the Inventory service before an
order is stored. Receiving an order publishes ``purchase.order.received``,
which the Inventory service consumes to increment stock.

Endpoints:
    POST /orders: Create a Draft purchase order
    GET /orders: List purchase orders with pagination
    GET /orders/{order_id}: Get a purchase order with its items
    PUT /orders/{order_id}: Replace the items of a Draft order
    POST /orders/{order_id}/receive: Draft -> Received
    POST /orders/{order_id}/pay: Received -> Paid
    GET /healthz: Health check endpoint for orchestration systems
"""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from sqlalchemy.orm import Session

from .. import config
from ..clients.contact_client import ContactClient
from ..clients.inventory_client import InventoryClient
from ..events import PURCHASE_ORDER_RECEIVED, EventPublisher
from ..health import check_health
from ..orders.orchestrator import OrderLifecycle, OrderOrchestrator
from ..orders.router import create_order_router
from ..responses import register_error_handlers
from ..service_token import ServiceTokenClient
from . import models, schemas
from .database import engine, get_db

SERVICE_NAME = "purchase"

config.configure_logging()
logger = logging.getLogger(__name__)

contact_client = ContactClient()
inventory_client = InventoryClient()
token_client = ServiceTokenClient(config.AUTH_SERVICE_URL, SERVICE_NAME, config.service_secret(SERVICE_NAME))
publisher = EventPublisher(config.REDIS_URL)

orchestrator = OrderOrchestrator(
    kind="purchase order",
    order_model=models.PurchaseOrder,
    item_model=models.PurchaseOrderItem,
    counterparty_field="vendor_id",
    lookup_counterparty=contact_client.get_vendor,
    inventory_client=inventory_client,
    token_client=token_client,
    publisher=publisher,
    lifecycle=OrderLifecycle(
        draft=models.PurchaseOrderStatus.DRAFT.value,
        advanced=models.PurchaseOrderStatus.RECEIVED.value,
        paid=models.PurchaseOrderStatus.PAID.value,
    ),
    advance_topic=PURCHASE_ORDER_RECEIVED,
)


def get_orchestrator() -> OrderOrchestrator:
    return orchestrator


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create database tables
    models.Base.metadata.create_all(bind=engine)
    logger.info("Purchase service started")
    yield
    await publisher.close()


app = FastAPI(title="purchase-service", lifespan=lifespan)
register_error_handlers(app)
app.include_router(create_order_router(
    get_db=get_db,
    get_orchestrator=get_orchestrator,
    create_schema=schemas.PurchaseOrderCreate,
    order_schema=schemas.PurchaseOrder,
    order_with_items_schema=schemas.PurchaseOrderWithItems,
    counterparty_field="vendor_id",
    advance_action="receive",
))


@app.get("/healthz")
def health(db: Session = Depends(get_db)):
    """Health check endpoint for the purchase service."""
    return check_health("purchase", db)
