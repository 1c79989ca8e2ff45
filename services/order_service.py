"""
Admin order management.

Orders are only listed and status-changed here; carrier assignment goes
through services.delivery_service.
"""

from __future__ import annotations

from typing import List

from core.api_client import MarketplaceAPIClient
from core.exceptions import ValidationError
from models import fields
from models.order import ORDER_STATUSES, Order
from logging_config import get_logger


logger = get_logger(__name__)


class OrderService:
    """Order endpoints used by the admin orders page."""

    def __init__(self, api_client: MarketplaceAPIClient):
        self._api = api_client

    def list_admin_orders(self) -> List[Order]:
        return Order.list_from(self._api.get("/api/orders/admin"))

    def update_status(self, order_id: str, status: str) -> Order:
        """
        Set an order's status (admin status dropdown).

        Raises:
            ValidationError: If the status is not one the backend knows
        """
        if status not in ORDER_STATUSES:
            raise ValidationError({"status": f"Unknown order status '{status}'"})

        logger.info(f"Changing order {order_id} status to {status}")
        response = self._api.put(f"/api/orders/{order_id}/status", json={"status": status})
        return Order.from_dict(fields.unwrap(response, "order"))
