"""
Services layer for ReBuy Web.

This module contains the business logic services:
- DeliveryService: delivery workflows and assignment threads
- OrderService, StockService, ReorderService, OfferService,
  FinanceService, FeedbackService, AuthService: endpoint wrappers that
  parse backend payloads into models

Thread Model:
    Main Thread (Flask)
    ├── Request threads (one API client per request)
    └── Assignment threads (one per confirmed carrier hand-off,
        each with its OWN API client)
"""

from .delivery_service import (
    AssignmentState,
    DeliveryService,
    DeliveryWorkflow,
    derive_assignment_state,
)
from .order_service import OrderService
from .stock_service import StockService, ReorderService
from .offer_service import OfferService
from .finance_service import FinanceService, FeedbackService
from .auth_service import AuthService

__all__ = [
    "AssignmentState",
    "DeliveryService",
    "DeliveryWorkflow",
    "derive_assignment_state",
    "OrderService",
    "StockService",
    "ReorderService",
    "OfferService",
    "FinanceService",
    "FeedbackService",
    "AuthService",
]
