"""Pytest fixtures: SQLite-backed sessions, fake registries, fake auth issuer and event publisher."""
import asyncio
import logging
from datetime import timedelta

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from orderflow.clients.contact_client import ContactClient
from orderflow.clients.inventory_client import InventoryClient
from orderflow.events import PURCHASE_ORDER_RECEIVED, SALES_ORDER_CONFIRMED
from orderflow.inventory import models as inventory_models
from orderflow.orders.orchestrator import OrderLifecycle, OrderOrchestrator
from orderflow.purchase import models as purchase_models
from orderflow.sales import models as sales_models
from orderflow.security import TOKEN_TYPE_SERVICE, TOKEN_TYPE_USER, create_token
from orderflow.service_token import ServiceTokenClient

# Configure logging for tests
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


def envelope(data, status_code=200):
    return {"status": status_code, "message": "success", "data": data}


def error(status_code, error_type, message):
    return {"status": status_code, "message": message, "error": {"type": error_type, "details": []}}


class FakeRegistry:
    """
    In-memory contact + inventory registry served through ``httpx.MockTransport``.

    ``fail_with`` forces every response to a given status code.
    ``delay`` makes each lookup sleep, to observe concurrency.
    """

    def __init__(self):
        self.customers = {}
        self.vendors = {}
        self.items = {}
        self.requests = []
        self.fail_with = None
        self.delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail_with is not None:
                return httpx.Response(self.fail_with, json=error(self.fail_with, "internal", "failure"))

            collection, entity_id = request.url.path.strip("/").split("/")
            store = {"customers": self.customers, "vendors": self.vendors, "items": self.items}[collection]
            if entity_id not in store:
                return httpx.Response(404, json=error(404, "not_found", "resource not found"))
            return httpx.Response(200, json=envelope(store[entity_id]))
        finally:
            self.in_flight -= 1

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def add_customer(self, customer_id, name="Acme Retail"):
        self.customers[customer_id] = {"id": customer_id, "name": name, "email": "buyer@example.com"}

    def add_vendor(self, vendor_id, name="Widget Supply"):
        self.vendors[vendor_id] = {"id": vendor_id, "name": name, "email": "sales@example.com"}

    def add_item(self, item_id, unit_price, sku=None):
        self.items[item_id] = {"id": item_id, "sku": sku or f"SKU-{item_id[:8]}", "name": "Item", "unit_price": unit_price}


class FakeIssuer:
    """Stands in for the auth service's ``POST /service-token``."""

    def __init__(self, token="service-token-1", expires_in=3600):
        self.token = token
        self.expires_in = expires_in
        self.status_code = 200
        self.calls = 0
        self.delay = 0.0

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json=error(self.status_code, "unauthorized", "rejected"))
        return httpx.Response(200, json=envelope({"token": self.token, "expires_in": self.expires_in}))

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class FakePublisher:
    """Records published events instead of sending them to Redis."""

    def __init__(self):
        self.published = []

    async def publish(self, topic, event):
        self.published.append((topic, event))


@pytest.fixture
def make_session_factory(tmp_path):
    """Return a function creating a file-backed SQLite session factory for a declarative Base."""
    engines = []

    def factory(base, name="test.db"):
        engine = create_engine(
            f"sqlite:///{tmp_path / name}",
            connect_args={"check_same_thread": False},
        )
        engines.append(engine)
        base.metadata.create_all(bind=engine)
        return sessionmaker(autocommit=False, autoflush=False, bind=engine)

    yield factory
    for engine in engines:
        engine.dispose()


@pytest.fixture
def registry():
    return FakeRegistry()


@pytest.fixture
def issuer():
    return FakeIssuer()


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
def tokens():
    """Bearer tokens for each role and for a service identity."""
    hour = timedelta(hours=1)
    return {
        "inventory_manager": create_token("user-1", TOKEN_TYPE_USER, hour, email="inv@example.com", role="inventory_manager"),
        "finance_manager": create_token("user-2", TOKEN_TYPE_USER, hour, email="fin@example.com", role="finance_manager"),
        "service": create_token("sales", TOKEN_TYPE_SERVICE, hour),
    }


@pytest.fixture
def headers(tokens):
    """Authorization headers keyed like ``tokens``."""
    return {name: {"Authorization": f"Bearer {token}"} for name, token in tokens.items()}


def build_orchestrator(kind, registry, issuer, publisher):
    """Wire an order orchestrator of ``kind`` ("sales" or "purchase") against the fakes."""
    contact = ContactClient("http://contact", transport=registry.transport())
    inventory = InventoryClient("http://inventory", transport=registry.transport())
    token_client = ServiceTokenClient("http://auth", kind, "secret", transport=issuer.transport())
    if kind == "sales":
        return OrderOrchestrator(
            kind="sales order",
            order_model=sales_models.SalesOrder,
            item_model=sales_models.OrderItem,
            counterparty_field="customer_id",
            lookup_counterparty=contact.get_customer,
            inventory_client=inventory,
            token_client=token_client,
            publisher=publisher,
            lifecycle=OrderLifecycle("Draft", "Confirmed", "Paid"),
            advance_topic=SALES_ORDER_CONFIRMED,
        )
    return OrderOrchestrator(
        kind="purchase order",
        order_model=purchase_models.PurchaseOrder,
        item_model=purchase_models.PurchaseOrderItem,
        counterparty_field="vendor_id",
        lookup_counterparty=contact.get_vendor,
        inventory_client=inventory,
        token_client=token_client,
        publisher=publisher,
        lifecycle=OrderLifecycle("Draft", "Received", "Paid"),
        advance_topic=PURCHASE_ORDER_RECEIVED,
    )


@pytest.fixture
def sales_orchestrator(registry, issuer, publisher):
    return build_orchestrator("sales", registry, issuer, publisher)


@pytest.fixture
def purchase_orchestrator(registry, issuer, publisher):
    return build_orchestrator("purchase", registry, issuer, publisher)


@pytest.fixture
def sales_session_factory(make_session_factory):
    return make_session_factory(sales_models.Base, "sales.db")


@pytest.fixture
def purchase_session_factory(make_session_factory):
    return make_session_factory(purchase_models.Base, "purchase.db")


@pytest.fixture
def inventory_session_factory(make_session_factory):
    return make_session_factory(inventory_models.Base, "inventory.db")


@pytest.fixture
def make_orchestrator(registry, issuer):
    """Return a function wiring an orchestrator of a given kind against a chosen publisher."""
    def factory(kind, publisher):
        return build_orchestrator(kind, registry, issuer, publisher)
    return factory
