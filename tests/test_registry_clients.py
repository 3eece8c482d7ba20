"""Tests for the registry HTTP clients' error mapping."""
import asyncio
from decimal import Decimal

import httpx
import pytest

from orderflow.clients.contact_client import ContactClient
from orderflow.clients.inventory_client import InventoryClient
from orderflow.errors import ForbiddenError, InternalError, NotFoundError, UnauthorizedError

ITEM_ID = "6f1c2d8e-5a4b-4c3d-9e8f-7a6b5c4d3e2f"


def test_get_item_returns_price_as_decimal(registry):
    registry.add_item(ITEM_ID, "12.50", sku="WIDGET-1")
    client = InventoryClient("http://inventory", transport=registry.transport())

    item = asyncio.run(client.get_item(ITEM_ID, "user-token"))

    assert item.id == ITEM_ID
    assert item.sku == "WIDGET-1"
    assert item.unit_price == Decimal("12.50")
    assert registry.requests[0].headers["Authorization"] == "Bearer user-token"
    assert registry.requests[0].url.path == f"/items/{ITEM_ID}"


def test_get_customer_and_vendor_use_their_collections(registry):
    registry.add_customer("c-1")
    registry.add_vendor("v-1")
    client = ContactClient("http://contact", transport=registry.transport())

    customer = asyncio.run(client.get_customer("c-1", "t"))
    vendor = asyncio.run(client.get_vendor("v-1", "t"))

    assert customer.name == "Acme Retail"
    assert vendor.name == "Widget Supply"
    with pytest.raises(NotFoundError):
        asyncio.run(client.get_vendor("c-1", "t"))


@pytest.mark.parametrize("status_code, expected", [
    (404, NotFoundError),
    (401, UnauthorizedError),
    (403, ForbiddenError),
    (500, InternalError),
    (502, InternalError),
])
def test_status_codes_map_to_errors(registry, status_code, expected):
    registry.fail_with = status_code
    client = InventoryClient("http://inventory", transport=registry.transport())

    with pytest.raises(expected):
        asyncio.run(client.get_item(ITEM_ID, "t"))


def test_transport_failure_is_internal():
    def timeout(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = InventoryClient("http://inventory", transport=httpx.MockTransport(timeout))

    with pytest.raises(InternalError):
        asyncio.run(client.get_item(ITEM_ID, "t"))


def test_malformed_payload_is_internal():
    def handler(request):
        return httpx.Response(200, json={"status": 200, "message": "success", "data": {"id": ITEM_ID}})

    client = InventoryClient("http://inventory", transport=httpx.MockTransport(handler))

    with pytest.raises(InternalError):
        asyncio.run(client.get_item(ITEM_ID, "t"))


def test_missing_token_sends_no_authorization_header(registry):
    registry.add_item(ITEM_ID, "1.00")
    client = InventoryClient("http://inventory", transport=registry.transport())

    asyncio.run(client.get_item(ITEM_ID, None))

    assert "Authorization" not in registry.requests[0].headers
