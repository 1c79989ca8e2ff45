"""
Data models for ReBuy Web.

Boundary schemas for every backend payload the back office consumes:
- Order: customer purchase tracked through payment and delivery
- StockItem / Product / ReorderRequest: inventory and catalogue
- SupplierOffer: supplier proposals awaiting admin decision
- FinanceEntry: income / expense ledger lines
- Feedback: customer ratings

All models are frozen dataclasses built with ``from_dict``; a payload that
does not match raises core.exceptions.ResponseSchemaError.
"""

from .order import Order, OrderItem, Customer, Address, CARRIERS
from .stock import StockItem, Product, ReorderRequest, derive_stock_status
from .offer import SupplierOffer, OfferStatus
from .finance import FinanceEntry
from .feedback import Feedback
from .user import parse_user_login, parse_admin_login

__all__ = [
    # Order models
    "Order",
    "OrderItem",
    "Customer",
    "Address",
    "CARRIERS",
    # Inventory models
    "StockItem",
    "Product",
    "ReorderRequest",
    "derive_stock_status",
    # Supplier offers
    "SupplierOffer",
    "OfferStatus",
    # Finance / feedback
    "FinanceEntry",
    "Feedback",
    # Auth
    "parse_user_login",
    "parse_admin_login",
]
