"""
Inventory data models: stock items, catalogue products, reorder requests.

Stock status is derived from quantity and reorder level on every read; it is
never stored or sent to the backend.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.exceptions import ResponseSchemaError
from . import fields

STOCK_CATEGORIES = ("Laptop", "Smartphone", "Tablet", "Accessories", "Other")

IN_STOCK = "In Stock"
LOW_STOCK = "Low Stock"
OUT_OF_STOCK = "Out of Stock"
STOCK_STATUSES = (IN_STOCK, LOW_STOCK, OUT_OF_STOCK)

REORDER_CATEGORIES = ("Laptops", "Mobile Phones", "Televisions", "Accessories", "Other")
REORDER_PRIORITIES = ("Low", "Normal", "High")


def derive_stock_status(quantity: int, reorder_level: int) -> str:
    """
    Out of Stock at zero, Low Stock up to and including the reorder level,
    In Stock above it.
    """
    if quantity <= 0:
        return OUT_OF_STOCK
    if quantity <= reorder_level:
        return LOW_STOCK
    return IN_STOCK


@dataclass(frozen=True)
class StockItem:
    """An inventory record with quantity and reorder threshold."""

    id: str
    name: str
    category: str
    quantity: int
    reorder_level: int
    supplier: str
    unit_price: float = 0.0
    description: str = ""
    date_added: Optional[datetime] = None

    @property
    def status(self) -> str:
        return derive_stock_status(self.quantity, self.reorder_level)

    @property
    def stock_value(self) -> float:
        return self.quantity * self.unit_price

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StockItem":
        data = fields.require_mapping(data, "StockItem")
        quantity = fields.integer(data, "quantity", "StockItem", default=None)
        if quantity < 0:
            raise ResponseSchemaError("StockItem", f"negative quantity {quantity}")

        return cls(
            id=fields.identifier(data, "StockItem"),
            name=fields.text(data, "name", "StockItem", default=None),
            category=fields.text(data, "category", "StockItem", default="Other"),
            quantity=quantity,
            reorder_level=fields.integer(data, "reorderLevel", "StockItem", default=0),
            supplier=fields.text(data, "supplier", "StockItem"),
            unit_price=fields.number(data, "price", "StockItem"),
            description=fields.text(data, "description", "StockItem"),
            date_added=fields.timestamp(data, "dateAdded", "StockItem"),
        )

    @classmethod
    def list_from(cls, payload: Any) -> List["StockItem"]:
        return [cls.from_dict(s) for s in fields.require_list(payload, "Stock list")]


@dataclass(frozen=True)
class Product:
    """A customer-facing catalogue entry backed by a stock record."""

    id: str
    name: str
    category: str
    description: str
    price: float
    image: str = ""
    stock_id: str = ""
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        data = fields.require_mapping(data, "Product")
        stock = data.get("stock")
        stock_name = ""
        stock_id = ""
        if isinstance(stock, dict):
            stock_name = fields.text(stock, "name", "Product")
            stock_id = fields.identifier(stock, "Product", required=False)
        elif stock:
            stock_id = str(stock)

        return cls(
            id=fields.identifier(data, "Product"),
            name=stock_name or fields.text(data, "name", "Product", default="Product"),
            category=fields.text(data, "category", "Product"),
            description=fields.text(data, "description", "Product"),
            price=fields.number(data, "price", "Product", default=None),
            image=fields.text(data, "image", "Product"),
            stock_id=stock_id,
            created_at=fields.timestamp(data, "createdAt", "Product"),
        )

    @classmethod
    def list_from(cls, payload: Any) -> List["Product"]:
        return [cls.from_dict(p) for p in fields.require_list(payload, "Product list")]


@dataclass(frozen=True)
class ReorderRequest:
    """A request to replenish a category from suppliers."""

    id: str
    title: str
    quantity: int
    category: str
    description: str
    priority: str = "Normal"
    created_at: Optional[datetime] = None

    @property
    def summary(self) -> str:
        return f"{self.title} ({self.quantity} units) - Priority: {self.priority}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReorderRequest":
        data = fields.require_mapping(data, "ReorderRequest")
        return cls(
            id=fields.identifier(data, "ReorderRequest"),
            title=fields.text(data, "title", "ReorderRequest", default=None),
            quantity=fields.integer(data, "quantity", "ReorderRequest", default=None),
            category=fields.text(data, "category", "ReorderRequest"),
            description=fields.text(data, "description", "ReorderRequest"),
            priority=fields.text(data, "priority", "ReorderRequest", default="Normal"),
            created_at=fields.timestamp(data, "createdAt", "ReorderRequest"),
        )

    @classmethod
    def list_from(cls, payload: Any) -> List["ReorderRequest"]:
        return [cls.from_dict(r) for r in fields.require_list(payload, "Reorder list")]
