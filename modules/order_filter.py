"""
Order list selection for the delivery page and the admin orders page.

Everything here is a pure function over a sequence of Order: inputs are
never mutated and relative order is always preserved.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from models.order import Order

# Delivery assignment eligibility
ELIGIBLE_PAYMENT_METHODS = ("online", "bank")
ELIGIBLE_STATUSES = ("confirmed", "transfer_pending")
IN_STORE_PICKUP = "store"

ALL_STATUSES = "all"


def is_eligible_for_delivery(order: Order) -> bool:
    """
    True if a carrier may be considered for this order.

    Orders already handed to a carrier stay eligible; the delivery workflow
    disables their actions instead.
    """
    return (
        order.payment_method in ELIGIBLE_PAYMENT_METHODS
        and order.status in ELIGIBLE_STATUSES
        and order.delivery_method != IN_STORE_PICKUP
    )


def eligible_for_delivery(orders: Iterable[Order]) -> List[Order]:
    """Stable filter of the orders shown on the delivery assignment page."""
    return [order for order in orders if is_eligible_for_delivery(order)]


def search_orders(orders: Iterable[Order], term: Optional[str]) -> List[Order]:
    """
    Case-insensitive search over order number, customer and item names.

    An empty or blank term returns every order.
    """
    needle = (term or "").strip().lower()
    if not needle:
        return list(orders)

    def matches(order: Order) -> bool:
        if needle in order.order_number.lower():
            return True
        if needle in order.customer.username.lower() or needle in order.customer.email.lower():
            return True
        return any(needle in item.name.lower() for item in order.items)

    return [order for order in orders if matches(order)]


def filter_by_status(orders: Iterable[Order], status: Optional[str]) -> List[Order]:
    """Keep orders with the given status; "all" (or nothing) keeps everything."""
    if not status or status == ALL_STATUSES:
        return list(orders)
    return [order for order in orders if order.status == status]
