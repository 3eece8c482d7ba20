"""Tests for the Contact service HTTP API."""
import pytest
from fastapi.testclient import TestClient

from orderflow.contact import models
from orderflow.contact.database import get_db
from orderflow.contact.main import app


@pytest.fixture
def client(make_session_factory):
    session_factory = make_session_factory(models.Base, "contact.db")

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def create(client, headers, collection="customers", email="Buyer@Example.com", name="Acme Retail"):
    return client.post(f"/{collection}", json={"name": name, "email": email}, headers=headers["inventory_manager"])


def test_create_and_get_customer(client, headers):
    created = create(client, headers)
    assert created.status_code == 201
    customer = created.json()["data"]
    assert customer["email"] == "buyer@example.com"

    fetched = client.get(f"/customers/{customer['id']}", headers=headers["service"])
    assert fetched.status_code == 200
    assert fetched.json()["data"]["name"] == "Acme Retail"


def test_customers_and_vendors_are_separate(client, headers):
    customer_id = create(client, headers).json()["data"]["id"]
    vendor = create(client, headers, collection="vendors")

    assert vendor.status_code == 201
    assert client.get(f"/vendors/{customer_id}", headers=headers["service"]).status_code == 404


def test_duplicate_email_conflicts(client, headers):
    create(client, headers)
    response = create(client, headers, email="buyer@example.com", name="Other")

    assert response.status_code == 409
    assert response.json()["error"]["type"] == "conflict"


def test_update_customer(client, headers):
    customer_id = create(client, headers).json()["data"]["id"]

    response = client.put(
        f"/customers/{customer_id}", json={"phone": "+1-555-0100"}, headers=headers["finance_manager"]
    )

    assert response.status_code == 200
    assert response.json()["data"]["phone"] == "+1-555-0100"


def test_update_to_taken_email_conflicts(client, headers):
    create(client, headers, email="one@example.com")
    second = create(client, headers, email="two@example.com").json()["data"]["id"]

    response = client.put(f"/customers/{second}", json={"email": "ONE@example.com"}, headers=headers["finance_manager"])

    assert response.status_code == 409


def test_delete_vendor_requires_finance_manager(client, headers):
    vendor_id = create(client, headers, collection="vendors").json()["data"]["id"]

    assert client.delete(f"/vendors/{vendor_id}", headers=headers["inventory_manager"]).status_code == 403
    assert client.delete(f"/vendors/{vendor_id}", headers=headers["finance_manager"]).status_code == 200
    assert client.get(f"/vendors/{vendor_id}", headers=headers["finance_manager"]).status_code == 404


def test_requires_token(client):
    assert client.get("/customers").status_code == 401


def test_invalid_id_is_bad_request(client, headers):
    assert client.get("/customers/123", headers=headers["service"]).status_code == 400
