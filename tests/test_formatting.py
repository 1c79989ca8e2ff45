"""
Unit tests for price/date formatting and the list filters.
"""

from datetime import datetime

import pytest

from core.exceptions import ValidationError
from models.finance import FinanceEntry
from models.offer import SupplierOffer
from models.stock import Product, StockItem
from modules.formatting import (
    format_date,
    format_price,
    format_price_input,
    format_signed_price,
    is_image,
    parse_price,
    slip_url,
)
from modules.list_filters import filter_finance, filter_offers, filter_products, filter_stock, sort_offers


class TestPriceFormatting:

    @pytest.mark.parametrize("amount,expected", [
        (1234.5, "Rs. 1,234.50"),
        (0, "Rs. 0.00"),
        (None, "Rs. 0.00"),
        (1500000, "Rs. 1,500,000.00"),
    ])
    def test_format_price(self, amount, expected):
        assert format_price(amount) == expected

    def test_signed(self):
        assert format_signed_price(500, income=True) == "+Rs. 500.00"
        assert format_signed_price(-500, income=False) == "-Rs. 500.00"

    @pytest.mark.parametrize("raw,expected", [
        ("1234567", "1,234,567"),
        ("1234.5678", "1,234.56"),
        ("Rs 12a34", "1,234"),
        ("", ""),
    ])
    def test_format_price_input(self, raw, expected):
        assert format_price_input(raw) == expected

    def test_parse_price_strips_separators(self):
        assert parse_price("1,234,567.89") == pytest.approx(1234567.89)

    def test_parse_price_rejects_garbage(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_price("", field="pricePerUnit")
        assert "pricePerUnit" in exc_info.value.field_errors

    @pytest.mark.parametrize("raw", ["nan", "inf", "-Infinity", "1e400"])
    def test_parse_price_rejects_non_finite(self, raw):
        with pytest.raises(ValidationError):
            parse_price(raw)


class TestDatesAndSlips:

    def test_format_date(self):
        assert format_date(datetime(2025, 1, 5, 10, 30)) == "2025-01-05"
        assert format_date(datetime(2025, 1, 5, 10, 30), with_time=True) == "2025-01-05 10:30"
        assert format_date(None) == "-"

    def test_slip_url(self):
        assert slip_url("http://backend.test/", "/uploads/a.png") == "http://backend.test/uploads/a.png"
        assert slip_url("http://backend.test", "https://cdn.lk/a.png") == "https://cdn.lk/a.png"
        assert slip_url("http://backend.test", "") == ""

    def test_is_image(self):
        assert is_image("uploads/slip.JPG")
        assert not is_image("uploads/slip.pdf")
        assert not is_image(None)


class TestListFilters:

    @pytest.fixture
    def stock(self):
        def item(sid, name, category, quantity, supplier="ACME"):
            return StockItem.from_dict({
                "_id": sid, "name": name, "category": category, "quantity": quantity,
                "reorderLevel": 5, "supplier": supplier,
            })
        return [
            item("1", "MacBook Air", "Laptop", 0),
            item("2", "Galaxy S21", "Smartphone", 3, supplier="Samsung LK"),
            item("3", "USB Cable", "Accessories", 50),
        ]

    def test_stock_search_matches_supplier(self, stock):
        assert [i.id for i in filter_stock(stock, "samsung")] == ["2"]

    def test_stock_by_category_and_status(self, stock):
        assert [i.id for i in filter_stock(stock, category="Laptop", status="Out of Stock")] == ["1"]
        assert [i.id for i in filter_stock(stock, category="All", status="All")] == ["1", "2", "3"]

    @pytest.fixture
    def offers(self):
        def offer(oid, title, price, status="Pending", delivery=None):
            return SupplierOffer.from_dict({
                "_id": oid, "title": title, "description": "", "pricePerUnit": price,
                "quantityOffered": 1, "status": status, "deliveryDate": delivery,
            })
        return [
            offer("a", "tablets", 300, delivery="2030-03-01T00:00:00Z"),
            offer("b", "Laptops", 100, status="Approved"),
            offer("c", "chargers", 200, delivery="2030-01-01T00:00:00Z"),
        ]

    def test_offer_status_filter(self, offers):
        assert [o.id for o in filter_offers(offers, status="Approved")] == ["b"]

    def test_sort_by_title_case_insensitive(self, offers):
        assert [o.id for o in sort_offers(offers, "title")] == ["c", "b", "a"]

    def test_sort_by_price_descending(self, offers):
        assert [o.id for o in sort_offers(offers, "pricePerUnit", descending=True)] == ["a", "c", "b"]

    def test_missing_delivery_date_sorts_last(self, offers):
        assert [o.id for o in sort_offers(offers, "deliveryDate", descending=True)] == ["a", "c", "b"]

    def test_unknown_sort_key_keeps_order(self, offers):
        assert [o.id for o in sort_offers(offers, "colour")] == ["a", "b", "c"]

    def test_products_sorted_by_price(self):
        products = [
            Product.from_dict({"_id": "p1", "name": "A", "category": "Laptop", "price": 900}),
            Product.from_dict({"_id": "p2", "name": "B", "category": "Laptop", "price": 300}),
            Product.from_dict({"_id": "p3", "name": "C", "category": "Tablet", "price": 500}),
        ]
        assert [p.id for p in filter_products(products, sort="low-high")] == ["p2", "p3", "p1"]
        assert [p.id for p in filter_products(products, category="Laptop", sort="high-low")] == ["p1", "p2"]

    def test_finance_filter(self):
        entries = [
            FinanceEntry.from_dict({"_id": "1", "type": "Income", "amount": 10, "category": "Salary"}),
            FinanceEntry.from_dict({"_id": "2", "type": "Expense", "amount": 5, "category": "Food"}),
        ]
        assert [e.id for e in filter_finance(entries, "Expense")] == ["2"]
        assert [e.id for e in filter_finance(entries, "All", "Salary")] == ["1"]
