"""
Sales Service API

Manages sales orders placed by customers. Customers are validated against the
Contact service and items are priced against the Inventory service before an
order is stored. Confirming an order publishes ``sales.order.confirmed``,
which the Inventory service consumes to decrement stock.

Endpoints:
    POST /orders: Create a Draft sales order
    GET /orders: List sales orders with pagination
    GET /orders/{order_id}: Get a sales order with its items
    PUT /orders/{order_id}: Replace the items of a Draft order
    POST /orders/{order_id}/confirm: Draft -> Confirmed
    POST /orders/{order_id}/pay: Confirmed -> Paid
    GET /healthz: Health check endpoint for orchestration systems
"""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from sqlalchemy.orm import Session

from .. import config
from ..clients.contact_client import ContactClient
from ..clients.inventory_client import InventoryClient
from ..events import SALES_ORDER_CONFIRMED, EventPublisher
from ..health import check_health
from ..orders.orchestrator import OrderLifecycle, OrderOrchestrator
from ..orders.router import create_order_router
from ..responses import register_error_handlers
from ..service_token import ServiceTokenClient
from . import models, schemas
from .database import engine, get_db

SERVICE_NAME = "sales"

config.configure_logging()
logger = logging.getLogger(__name__)

contact_client = ContactClient()
inventory_client = InventoryClient()
token_client = ServiceTokenClient(config.AUTH_SERVICE_URL, SERVICE_NAME, config.service_secret(SERVICE_NAME))
publisher = EventPublisher(config.REDIS_URL)

orchestrator = OrderOrchestrator(
    kind="sales order",
    order_model=models.SalesOrder,
    item_model=models.OrderItem,
    counterparty_field="customer_id",
    lookup_counterparty=contact_client.get_customer,
    inventory_client=inventory_client,
    token_client=token_client,
    publisher=publisher,
    lifecycle=OrderLifecycle(
        draft=models.SalesOrderStatus.DRAFT.value,
        advanced=models.SalesOrderStatus.CONFIRMED.value,
        paid=models.SalesOrderStatus.PAID.value,
    ),
    advance_topic=SALES_ORDER_CONFIRMED,
)


def get_orchestrator() -> OrderOrchestrator:
    return orchestrator


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create database tables
    models.Base.metadata.create_all(bind=engine)
    logger.info("Sales service started")
    yield
    await publisher.close()


app = FastAPI(title="sales-service", lifespan=lifespan)
register_error_handlers(app)
app.include_router(create_order_router(
    get_db=get_db,
    get_orchestrator=get_orchestrator,
    create_schema=schemas.SalesOrderCreate,
    order_schema=schemas.SalesOrder,
    order_with_items_schema=schemas.SalesOrderWithItems,
    counterparty_field="customer_id",
    advance_action="confirm",
))


@app.get("/healthz")
def health(db: Session = Depends(get_db)):
    """
    Health check endpoint for the sales service.

    Returns:
        200 when the database is reachable, 503 otherwise
    """
    return check_health("sales", db)
