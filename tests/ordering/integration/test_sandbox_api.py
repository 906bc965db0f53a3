"""Integration tests for the non-production sandbox routes."""

import pytest
from catalogue.pricing import get_catalog
from fastapi import FastAPI
from fastapi.testclient import TestClient
from identity.cart import get_cart_store
from ordering.api import sandbox_router
from payments.gateway import get_gateway

_LINES = [
    {"product_id": "prod-a", "name": "Coffee Beans", "quantity": 5, "unit_price": 12.0},
    {"product_id": "prod-b", "name": "Oat Milk", "quantity": 4, "unit_price": 2.5, "discount": 10.0},
]


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(sandbox_router)
    return TestClient(app)


class TestSeedCart:
    def test_seeds_cart_and_prices(self, client):
        response = client.post("/sandbox/carts/user-lt-001", json={"items": _LINES})
        assert response.status_code == 201
        assert response.json() == {"user_id": "user-lt-001", "item_count": 2}

        assert [line["product_id"] for line in get_cart_store().get_cart("user-lt-001")] == ["prod-a", "prod-b"]
        assert get_catalog().get_price("prod-b").discount == 10.0

    def test_empty_cart_is_rejected(self, client):
        assert client.post("/sandbox/carts/user-lt-001", json={"items": []}).status_code == 422

    def test_blocked_in_production(self, client, monkeypatch):
        monkeypatch.setenv("PROTEAN_ENV", "production")
        response = client.post("/sandbox/carts/user-lt-001", json={"items": _LINES})
        assert response.status_code == 403
        assert "not available in production" in response.json()["detail"]


class TestConfigurePayPal:
    def test_configure_failure(self, client):
        response = client.post("/sandbox/paypal/configure", json={"should_succeed": False, "failure_reason": "Declined"})
        assert response.json() == {"adapter": "FakePayPal", "should_succeed": False, "failure_reason": "Declined"}
        assert get_gateway().should_succeed is False

    def test_blocked_in_production(self, client, monkeypatch):
        monkeypatch.setenv("PROTEAN_ENV", "production")
        assert client.post("/sandbox/paypal/configure", json={}).status_code == 403
