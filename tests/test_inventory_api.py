"""Tests for the Inventory service HTTP API."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from orderflow.inventory.database import get_db
from orderflow.inventory.main import app


@pytest.fixture
def client(inventory_session_factory):
    def override_get_db():
        db = inventory_session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def create_item(client, headers, sku="widget-1", unit_price="12.50"):
    return client.post(
        "/items",
        json={"name": "Widget", "sku": sku, "unit_price": unit_price},
        headers=headers["inventory_manager"],
    )


def test_health(client):
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"service": "inventory", "status": "healthy", "checks": {"database": "healthy"}}


def test_health_reports_unreachable_database(client):
    class UnreachableSession:
        def execute(self, statement):
            raise OperationalError("SELECT 1", {}, Exception("could not connect to server"))

        def close(self):
            pass

    app.dependency_overrides[get_db] = UnreachableSession
    response = client.get("/healthz")

    assert response.status_code == 503
    body = response.json()
    assert body["status"] == "unhealthy"
    assert body["checks"] == {"database": "unhealthy"}


def test_create_item_wraps_response_and_creates_stock(client, headers):
    response = create_item(client, headers)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == 201
    assert body["data"]["sku"] == "WIDGET-1"
    assert float(body["data"]["unit_price"]) == 12.5

    stock = client.get(f"/items/{body['data']['id']}/stock", headers=headers["inventory_manager"])
    assert stock.status_code == 200
    assert stock.json()["data"]["quantity"] == 0


def test_duplicate_sku_conflicts(client, headers):
    create_item(client, headers, sku="dup-1")
    response = create_item(client, headers, sku="DUP-1")

    assert response.status_code == 409
    assert response.json()["error"]["type"] == "conflict"


def test_reads_require_a_token(client):
    response = client.get("/items")

    assert response.status_code == 401
    assert response.json()["error"]["type"] == "unauthorized"


def test_invalid_token_is_unauthorized(client):
    response = client.get("/items", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_service_token_can_read_and_write(client, headers):
    created = client.post(
        "/items",
        json={"name": "Gizmo", "sku": "giz-1", "unit_price": "3.00"},
        headers=headers["service"],
    )
    assert created.status_code == 201

    fetched = client.get(f"/items/{created.json()['data']['id']}", headers=headers["service"])
    assert fetched.status_code == 200
    assert fetched.json()["data"]["name"] == "Gizmo"


def test_delete_requires_finance_manager(client, headers):
    item_id = create_item(client, headers).json()["data"]["id"]

    forbidden = client.delete(f"/items/{item_id}", headers=headers["inventory_manager"])
    assert forbidden.status_code == 403
    assert forbidden.json()["error"]["type"] == "forbidden"

    deleted = client.delete(f"/items/{item_id}", headers=headers["finance_manager"])
    assert deleted.status_code == 200
    assert client.get(f"/items/{item_id}", headers=headers["finance_manager"]).status_code == 404


def test_invalid_id_is_bad_request(client, headers):
    response = client.get("/items/not-a-uuid", headers=headers["inventory_manager"])

    assert response.status_code == 400
    assert response.json()["error"]["type"] == "bad_request"


def test_missing_item_is_not_found(client, headers):
    response = client.get("/items/99999999-9999-4999-8999-999999999999", headers=headers["inventory_manager"])

    assert response.status_code == 404


def test_update_item_keeps_stock(client, headers):
    item_id = create_item(client, headers).json()["data"]["id"]
    client.put(f"/items/{item_id}/stock", json={"quantity": 4}, headers=headers["inventory_manager"])

    response = client.put(f"/items/{item_id}", json={"unit_price": "15.00"}, headers=headers["inventory_manager"])

    assert response.status_code == 200
    assert float(response.json()["data"]["unit_price"]) == 15.0
    stock = client.get(f"/items/{item_id}/stock", headers=headers["inventory_manager"])
    assert stock.json()["data"]["quantity"] == 4


def test_stock_adjustment_by_delta(client, headers):
    item_id = create_item(client, headers).json()["data"]["id"]

    added = client.put(f"/items/{item_id}/stock", json={"quantity": 10}, headers=headers["inventory_manager"])
    assert added.json()["data"]["quantity"] == 10

    removed = client.put(f"/items/{item_id}/stock", json={"quantity": -3}, headers=headers["inventory_manager"])
    assert removed.json()["data"]["quantity"] == 7

    rejected = client.put(f"/items/{item_id}/stock", json={"quantity": -8}, headers=headers["inventory_manager"])
    assert rejected.status_code == 400
    assert rejected.json()["error"]["type"] == "bad_request"

    stock = client.get(f"/items/{item_id}/stock", headers=headers["inventory_manager"])
    assert stock.json()["data"]["quantity"] == 7


def test_list_items(client, headers):
    create_item(client, headers, sku="b-2")
    create_item(client, headers, sku="a-1")

    response = client.get("/items", headers=headers["finance_manager"])

    assert [i["sku"] for i in response.json()["data"]] == ["A-1", "B-2"]
