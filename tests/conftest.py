"""
Shared fixtures.

The app is built with TestingConfig; every API client it creates is the
``api`` MagicMock, so tests script backend answers on it directly.
"""

import pytest
from unittest.mock import MagicMock

from app import create_app
from config import TestingConfig
from models.order import Order


@pytest.fixture
def order_payload():
    """Factory for backend order JSON; keyword overrides replace top-level keys."""
    def _make(order_id="665f1c2ab4e8d90012a1b2c3", **overrides):
        data = {
            "_id": order_id,
            "orderNumber": f"ORD-{order_id[-4:]}",
            "customer": {"username": "nimal", "email": "nimal@example.com", "phone": "0771234567"},
            "items": [{"name": "iPhone 12", "quantity": 1, "price": 95000}],
            "total": 95000,
            "paymentMethod": "online",
            "status": "confirmed",
            "deliveryMethod": "home",
            "address": {"line1": "12 Galle Road", "city": "Colombo", "postalCode": "00300"},
            "createdAt": "2025-01-05T10:00:00.000Z",
        }
        data.update(overrides)
        return data
    return _make


@pytest.fixture
def make_order(order_payload):
    """Factory for parsed Order instances."""
    def _make(order_id="665f1c2ab4e8d90012a1b2c3", **overrides):
        return Order.from_dict(order_payload(order_id, **overrides))
    return _make


@pytest.fixture
def api():
    """The API client every view receives."""
    return MagicMock(name="MarketplaceAPIClient")


@pytest.fixture
def app(api):
    app = create_app(TestingConfig)
    app.config["API_CLIENT_FACTORY"] = MagicMock(return_value=api)
    yield app
    app.config["DELIVERY_SERVICE"].shutdown(timeout_per_thread=1.0)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    """Test client with an admin session."""
    with client.session_transaction() as sess:
        sess["adminToken"] = "admin-token"
        sess["adminData"] = {"username": "root", "email": "root@rebuy.lk"}
        sess["adminRole"] = "admin"
    return client


@pytest.fixture
def supplier_client(client):
    """Test client with a supplier session."""
    with client.session_transaction() as sess:
        sess["token"] = "user-token"
        sess["user"] = {"id": "sup-1", "username": "kamal", "email": "kamal@supply.lk"}
        sess["role"] = "supplier"
    return client
