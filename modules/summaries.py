"""
Summary statistics for dashboards and report headers.

Each function reduces an in-memory collection (usually the currently
filtered list) to a small frozen summary. No I/O, no business rules beyond
the derived stock status.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable

from models.feedback import Feedback, MAX_RATING, MIN_RATING
from models.finance import FinanceEntry
from models.offer import OfferStatus, SupplierOffer
from models.order import Order
from models.stock import STOCK_STATUSES, StockItem


@dataclass(frozen=True)
class StockSummary:
    total_items: int
    total_units: int
    total_value: float
    by_status: Dict[str, int] = field(default_factory=dict)
    units_by_category: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class OfferSummary:
    total: int
    total_value: float
    by_status: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class FinanceSummary:
    total_income: float
    total_expenses: float

    @property
    def balance(self) -> float:
        return self.total_income - self.total_expenses

    @property
    def savings_rate(self) -> float:
        """Percentage of income kept; 0 when there is no income."""
        if self.total_income <= 0:
            return 0.0
        return self.balance / self.total_income * 100


@dataclass(frozen=True)
class OrderSummary:
    count: int
    revenue: float
    by_status: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class FeedbackSummary:
    total: int
    average_rating: float
    distribution: Dict[int, int] = field(default_factory=dict)


def summarize_stock(items: Iterable[StockItem]) -> StockSummary:
    items = list(items)
    by_status = {status: 0 for status in STOCK_STATUSES}
    units_by_category: Counter = Counter()
    for item in items:
        by_status[item.status] += 1
        units_by_category[item.category] += item.quantity

    return StockSummary(
        total_items=len(items),
        total_units=sum(item.quantity for item in items),
        total_value=sum(item.stock_value for item in items),
        by_status=by_status,
        units_by_category=dict(sorted(units_by_category.items())),
    )


def summarize_offers(offers: Iterable[SupplierOffer]) -> OfferSummary:
    offers = list(offers)
    by_status = {status.value: 0 for status in OfferStatus}
    for offer in offers:
        by_status[offer.status.value] += 1
    return OfferSummary(
        total=len(offers),
        total_value=sum(offer.total_value for offer in offers),
        by_status=by_status,
    )


def summarize_finance(entries: Iterable[FinanceEntry]) -> FinanceSummary:
    income = 0.0
    expenses = 0.0
    for entry in entries:
        if entry.is_income:
            income += entry.amount
        else:
            expenses += entry.amount
    return FinanceSummary(total_income=income, total_expenses=expenses)


def summarize_orders(orders: Iterable[Order]) -> OrderSummary:
    orders = list(orders)
    return OrderSummary(
        count=len(orders),
        revenue=sum(order.total for order in orders),
        by_status=dict(Counter(order.status for order in orders)),
    )


def summarize_feedback(feedback: Iterable[Feedback]) -> FeedbackSummary:
    """Average is rounded to one decimal, 0.0 with no reviews."""
    feedback = list(feedback)
    distribution = {stars: 0 for stars in range(MAX_RATING, MIN_RATING - 1, -1)}
    for item in feedback:
        distribution[item.rating] += 1

    average = round(sum(f.rating for f in feedback) / len(feedback), 1) if feedback else 0.0
    return FeedbackSummary(total=len(feedback), average_rating=average, distribution=distribution)
