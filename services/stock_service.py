"""
Inventory, catalogue and reorder request endpoints.

Stock reads are public (GET /api/stock) while writes go through the admin
routes (/api/admin/auth/stocks). The backend answers stock writes with just
a message, so those methods return the message for flashing.
"""

from __future__ import annotations

from typing import Any, Dict, List

from core.api_client import MarketplaceAPIClient
from models import fields
from models.stock import Product, ReorderRequest, StockItem
from logging_config import get_logger


logger = get_logger(__name__)

STOCK_READ_PATH = "/api/stock"
STOCK_ADMIN_PATH = "/api/admin/auth/stocks"
PRODUCTS_PATH = "/api/products"
REORDERS_PATH = "/api/reorders"


class StockService:
    """Stock CRUD plus the customer product listing."""

    def __init__(self, api_client: MarketplaceAPIClient):
        self._api = api_client

    # =========================================================================
    # STOCK
    # =========================================================================

    def list_stock(self) -> List[StockItem]:
        return StockItem.list_from(self._api.get(STOCK_READ_PATH, auth=False))

    def get_stock(self, stock_id: str) -> StockItem:
        return StockItem.from_dict(self._api.get(f"{STOCK_READ_PATH}/{stock_id}", auth=False))

    def create_stock(self, payload: Dict[str, Any]) -> str:
        response = self._api.post(STOCK_ADMIN_PATH, json=payload)
        logger.info(f"Created stock item '{payload.get('name')}'")
        return fields.message_of(response, "Stock added successfully!")

    def update_stock(self, stock_id: str, payload: Dict[str, Any]) -> str:
        response = self._api.put(f"{STOCK_ADMIN_PATH}/{stock_id}", json=payload)
        logger.info(f"Updated stock item {stock_id}")
        return fields.message_of(response, "Stock updated successfully!")

    def delete_stock(self, stock_id: str) -> str:
        response = self._api.delete(f"{STOCK_ADMIN_PATH}/{stock_id}")
        logger.info(f"Deleted stock item {stock_id}")
        return fields.message_of(response, "Stock deleted successfully!")

    # =========================================================================
    # PRODUCTS
    # =========================================================================

    def list_products(self) -> List[Product]:
        return Product.list_from(self._api.get(PRODUCTS_PATH, auth=False))


class ReorderService:
    """Reorder requests raised by inventory managers."""

    def __init__(self, api_client: MarketplaceAPIClient):
        self._api = api_client

    def list_requests(self) -> List[ReorderRequest]:
        return ReorderRequest.list_from(self._api.get(REORDERS_PATH))

    def create_request(self, payload: Dict[str, Any]) -> ReorderRequest:
        response = self._api.post(REORDERS_PATH, json=payload)
        return ReorderRequest.from_dict(fields.unwrap(response, "request"))

    def update_request(self, request_id: str, payload: Dict[str, Any]) -> ReorderRequest:
        response = self._api.put(f"{REORDERS_PATH}/{request_id}", json=payload)
        return ReorderRequest.from_dict(fields.unwrap(response, "request"))

    def delete_request(self, request_id: str) -> str:
        response = self._api.delete(f"{REORDERS_PATH}/{request_id}")
        return fields.message_of(response, "Reorder request deleted successfully")
