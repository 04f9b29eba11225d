"""API test fixtures — TestClient over the full app with an in-memory store."""

import pytest
from starlette.testclient import TestClient

from core.config import AppConfig


@pytest.fixture
def app(memory_store):
    """Application wired to a fresh in-memory store."""
    from main import create_app

    return create_app(AppConfig(store_backend="memory"), store=memory_store)


@pytest.fixture
def client(app):
    """Test client; server errors come back as 500 responses."""
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def customer_payload():
    return {
        "customer": {"firstName": "A", "lastName": "B", "phoneNumber": "1111111111"},
        "addresses": [
            {"addressLine": "X", "city": "Y", "state": "Z", "pinCode": "123456"},
        ],
    }


@pytest.fixture
def create_customer(client):
    """POST a customer, returning its ID."""

    def _create(phone: str = "1111111111", addresses: list[dict] | None = None, **names) -> int:
        body = {
            "customer": {
                "firstName": names.get("first", "A"),
                "lastName": names.get("last", "B"),
                "phoneNumber": phone,
            },
            "addresses": addresses or [
                {"addressLine": "X", "city": "Y", "state": "Z", "pinCode": "123456"},
            ],
        }
        response = client.post("/api/customers", json=body)
        assert response.status_code == 201, response.text
        return response.json()["customerId"]

    return _create
