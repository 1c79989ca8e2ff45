"""
Order data models.

An order is created by the checkout flow (outside this application) and is
mutated here by admin actions: status changes and delivery assignment.
Orders are never deleted from the back office.

Orders are plain dataclasses parsed from backend JSON via Order.from_dict();
the delivery workflow replaces whole Order instances when a newer copy
arrives, it never edits one in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from . import fields

# Allowed values, as stored by the backend
PAYMENT_METHODS = ("online", "bank", "cash_on_delivery")
ORDER_STATUSES = ("pending", "transfer_pending", "confirmed", "shipped", "delivered", "cancelled")
DELIVERY_METHODS = ("store", "home", "different", "Uber", "PickMe")

# Third-party carriers an admin can hand an order to
CARRIERS = ("Uber", "PickMe")

STATUS_LABELS = {
    "pending": "Pending",
    "transfer_pending": "Transfer Pending",
    "confirmed": "Confirmed",
    "shipped": "Shipped",
    "delivered": "Delivered",
    "cancelled": "Cancelled",
}

PAYMENT_LABELS = {
    "online": "Online Payment",
    "bank": "Bank Transfer",
    "cash_on_delivery": "Cash on Delivery",
}


@dataclass(frozen=True)
class OrderItem:
    """A single line item."""

    name: str
    quantity: int
    unit_price: float
    image: str = ""
    product_id: str = ""

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrderItem":
        data = fields.require_mapping(data, "OrderItem")
        product = data.get("product")
        if isinstance(product, dict):
            product = product.get("_id", "")
        return cls(
            name=fields.text(data, "name", "OrderItem", default=None),
            quantity=fields.integer(data, "quantity", "OrderItem", default=1),
            unit_price=fields.number(data, "price", "OrderItem", default=0.0),
            image=fields.text(data, "image", "OrderItem"),
            product_id=str(product or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "price": self.unit_price,
            "image": self.image,
            "product": self.product_id,
        }


@dataclass(frozen=True)
class Customer:
    username: str = ""
    email: str = ""
    phone: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Customer":
        if not data:
            return cls()
        data = fields.require_mapping(data, "Customer")
        return cls(
            username=fields.text(data, "username", "Customer"),
            email=fields.text(data, "email", "Customer"),
            phone=fields.text(data, "phone", "Customer"),
        )


@dataclass(frozen=True)
class Address:
    line1: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = "Sri Lanka"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Address":
        if not data:
            return cls()
        data = fields.require_mapping(data, "Address")
        return cls(
            line1=fields.text(data, "line1", "Address"),
            city=fields.text(data, "city", "Address"),
            postal_code=fields.text(data, "postalCode", "Address"),
            country=fields.text(data, "country", "Address", default="Sri Lanka"),
        )

    def one_line(self) -> str:
        return ", ".join(part for part in (self.line1, self.city, self.postal_code, self.country) if part)


@dataclass(frozen=True)
class StatusChange:
    """One entry of the order's status history."""

    status: str
    updated_at: Optional[datetime] = None
    note: str = ""
    updated_by: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "StatusChange":
        data = fields.require_mapping(data, "Order history")
        return cls(
            status=fields.text(data, "status", "Order history"),
            updated_at=fields.timestamp(data, "updatedAt", "Order history"),
            note=fields.text(data, "note", "Order history"),
            updated_by=fields.text(data, "updatedBy", "Order history"),
        )


@dataclass(frozen=True)
class Order:
    """
    A customer purchase tracked through payment and delivery.

    Unknown status / method strings are kept as-is: the backend owns the
    vocabulary, the back office only reasons about the values it knows.
    """

    id: str
    order_number: str
    customer: Customer
    items: List[OrderItem]
    total: float
    payment_method: str
    status: str
    delivery_method: str = "home"
    address: Address = field(default_factory=Address)
    subtotal: float = 0.0
    delivery_charge: float = 0.0
    slip_url: str = ""
    history: List[StatusChange] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @property
    def status_label(self) -> str:
        return STATUS_LABELS.get(self.status, self.status.replace("_", " ").title())

    @property
    def payment_label(self) -> str:
        return PAYMENT_LABELS.get(self.payment_method, self.payment_method)

    @property
    def item_names(self) -> str:
        return ", ".join(item.name for item in self.items)

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def has_carrier(self) -> bool:
        return self.delivery_method in CARRIERS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        """
        Parse an order as returned by /api/orders/*.

        Raises:
            ResponseSchemaError: If required fields are missing or mistyped
        """
        data = fields.require_mapping(data, "Order")
        items = [OrderItem.from_dict(i) for i in fields.require_list(data.get("items", []), "Order")]

        slip = data.get("paymentSlip") or {}
        history = [StatusChange.from_dict(h) for h in fields.require_list(data.get("history", []), "Order")]

        return cls(
            id=fields.identifier(data, "Order"),
            order_number=fields.text(data, "orderNumber", "Order"),
            customer=Customer.from_dict(data.get("customer")),
            items=items,
            total=fields.number(data, "total", "Order", default=None),
            payment_method=fields.text(data, "paymentMethod", "Order"),
            status=fields.text(data, "status", "Order", default="pending"),
            delivery_method=fields.text(data, "deliveryMethod", "Order", default="home"),
            address=Address.from_dict(data.get("address")),
            subtotal=fields.number(data, "subtotal", "Order"),
            delivery_charge=fields.number(data, "deliveryCharge", "Order"),
            slip_url=fields.text(slip, "url", "Order") if isinstance(slip, dict) else "",
            history=history,
            created_at=fields.timestamp(data, "createdAt", "Order"),
        )

    @classmethod
    def list_from(cls, payload: Any) -> List["Order"]:
        return [cls.from_dict(o) for o in fields.require_list(payload, "Order list")]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form, in the backend's field names."""
        return {
            "_id": self.id,
            "orderNumber": self.order_number,
            "customer": {
                "username": self.customer.username,
                "email": self.customer.email,
                "phone": self.customer.phone,
            },
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "subtotal": self.subtotal,
            "deliveryCharge": self.delivery_charge,
            "paymentMethod": self.payment_method,
            "status": self.status,
            "deliveryMethod": self.delivery_method,
            "address": {
                "line1": self.address.line1,
                "city": self.address.city,
                "postalCode": self.address.postal_code,
                "country": self.address.country,
            },
            "createdAt": fields.iso(self.created_at),
        }
