"""
In-memory search, filter and sort for the list views.

The backend returns full collections; narrowing them down happens here so
the same filtered list feeds both the HTML table and the report exports.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from models.finance import FinanceEntry
from models.offer import SupplierOffer
from models.stock import Product, StockItem

ALL = "All"

SORT_LOW_HIGH = "low-high"
SORT_HIGH_LOW = "high-low"

# Sortable offer columns -> attribute
OFFER_SORT_KEYS = {
    "title": "title",
    "pricePerUnit": "price_per_unit",
    "quantityOffered": "quantity_offered",
    "deliveryDate": "delivery_date",
    "status": "status",
}


def _needle(term: Optional[str]) -> str:
    return (term or "").strip().lower()


def _is_all(value: Optional[str]) -> bool:
    return not value or value.lower() == ALL.lower()


# =============================================================================
# STOCK
# =============================================================================

def filter_stock(items: Iterable[StockItem], term: Optional[str] = None,
                 category: Optional[str] = None, status: Optional[str] = None) -> List[StockItem]:
    """Search by name or supplier, then narrow by category and derived status."""
    needle = _needle(term)
    result = []
    for item in items:
        if needle and needle not in item.name.lower() and needle not in item.supplier.lower():
            continue
        if not _is_all(category) and item.category != category:
            continue
        if not _is_all(status) and item.status != status:
            continue
        result.append(item)
    return result


def stock_categories(items: Iterable[StockItem]) -> List[str]:
    """Distinct non-empty categories, sorted."""
    return sorted({item.category for item in items if item.category})


# =============================================================================
# OFFERS
# =============================================================================

def filter_offers(offers: Iterable[SupplierOffer], term: Optional[str] = None,
                  status: Optional[str] = None) -> List[SupplierOffer]:
    """Search title and description; status "All" keeps every offer."""
    needle = _needle(term)
    return [
        offer for offer in offers
        if (not needle or needle in offer.title.lower() or needle in offer.description.lower())
        and (_is_all(status) or offer.status.value == status)
    ]


def sort_offers(offers: Iterable[SupplierOffer], key: Optional[str],
                descending: bool = False) -> List[SupplierOffer]:
    """
    Sort by one of OFFER_SORT_KEYS; unknown keys keep the input order.

    Offers without a delivery date sort last when sorting by date.
    """
    offers = list(offers)
    attribute = OFFER_SORT_KEYS.get(key or "")
    if attribute is None:
        return offers

    def sort_key(offer: SupplierOffer):
        value = getattr(offer, attribute)
        if attribute == "status":
            return (0, value.value)
        if value is None:
            return (1, 0)
        if attribute == "title":
            return (0, value.lower())
        return (0, value)

    present = [o for o in offers if sort_key(o)[0] == 0]
    missing = [o for o in offers if sort_key(o)[0] == 1]
    return sorted(present, key=sort_key, reverse=descending) + missing


# =============================================================================
# PRODUCTS
# =============================================================================

def filter_products(products: Iterable[Product], term: Optional[str] = None,
                    category: Optional[str] = None, sort: Optional[str] = None) -> List[Product]:
    """
    Customer listing: search name and description, filter by category,
    optionally sort by price ("low-high" / "high-low").
    """
    needle = _needle(term)
    result = [
        product for product in products
        if (not needle or needle in product.description.lower() or needle in product.name.lower())
        and (_is_all(category) or product.category == category)
    ]
    if sort == SORT_LOW_HIGH:
        result.sort(key=lambda p: p.price)
    elif sort == SORT_HIGH_LOW:
        result.sort(key=lambda p: p.price, reverse=True)
    return result


# =============================================================================
# FINANCE
# =============================================================================

def filter_finance(entries: Iterable[FinanceEntry], entry_type: Optional[str] = None,
                   category: Optional[str] = None) -> List[FinanceEntry]:
    return [
        entry for entry in entries
        if (_is_all(entry_type) or entry.type == entry_type)
        and (_is_all(category) or entry.category == category)
    ]
