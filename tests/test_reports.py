"""
Unit tests for PDF reports, the merged pack, and CSV exports.

PDFs are read back with pypdf to check what was printed.
"""

import csv
import io
from datetime import datetime

import pytest
from pypdf import PdfReader

from models.finance import FinanceEntry
from models.stock import StockItem
from modules import csv_export, reports


def pdf_text(pdf: bytes) -> str:
    reader = PdfReader(io.BytesIO(pdf))
    return "\n".join(page.extract_text() for page in reader.pages)


def page_count(pdf: bytes) -> int:
    return len(PdfReader(io.BytesIO(pdf)).pages)


# Fixtures

@pytest.fixture
def company():
    return reports.CompanyInfo(
        name="ReBuy",
        address="77A, Market Street, Colombo",
        contact="+94 77 321 4567",
        email="rebuy@gmail.com",
    )


@pytest.fixture
def stock_items():
    return [
        StockItem.from_dict({"_id": "1", "name": "MacBook Air", "category": "Laptop", "quantity": 0,
                             "reorderLevel": 2, "supplier": "Apple LK", "price": 250000}),
        StockItem.from_dict({"_id": "2", "name": "Galaxy Tab", "category": "Tablet", "quantity": 9,
                             "reorderLevel": 2, "supplier": "Samsung LK", "price": 80000}),
    ]


@pytest.fixture
def finance_entries():
    return [
        FinanceEntry.from_dict({"_id": "1", "type": "Income", "amount": 1000, "description": "Sales",
                                "date": "2025-02-01T00:00:00Z"}),
        FinanceEntry.from_dict({"_id": "2", "type": "Expense", "amount": 400, "description": "Rent",
                                "category": "Bills", "date": "2025-02-03T00:00:00Z"}),
    ]


# Tests

class TestBuildReport:

    def test_stock_report_contents(self, company, stock_items):
        pdf = reports.build_stock_report(stock_items, company, datetime(2025, 3, 1, 9, 30))
        text = pdf_text(pdf)

        assert pdf.startswith(b"%PDF")
        assert "Inventory Report" in text
        assert "77A, Market Street, Colombo" in text
        assert "MacBook Air" in text
        assert "Out of Stock" in text
        assert "Generated: 2025-03-01 09:30" in text

    def test_finance_report_summary(self, company, finance_entries):
        text = pdf_text(reports.build_finance_report(finance_entries, company))

        assert "Financial Report" in text
        assert "Rs. 600.00" in text
        assert "60.0%" in text
        assert "-Rs. 400.00" in text

    def test_empty_collection(self, company):
        text = pdf_text(reports.build_order_report([], company))
        assert "No records for the selected filters." in text

    def test_long_list_flows_over_pages(self, company):
        items = [
            StockItem.from_dict({"_id": str(i), "name": "Item", "category": "Other", "quantity": i,
                                 "reorderLevel": 1, "supplier": "ACME"})
            for i in range(150)
        ]
        assert page_count(reports.build_stock_report(items, company)) > 1

    def test_offer_report(self, company):
        assert "Supplier Offers Report" in pdf_text(reports.build_offer_report([], company))

    def test_company_from_config(self):
        info = reports.CompanyInfo.from_config({
            "COMPANY_NAME": "X", "COMPANY_ADDRESS": "Y", "COMPANY_CONTACT": "Z", "COMPANY_EMAIL": "e@x",
        })
        assert info.name == "X"
        assert info.email == "e@x"


class TestMergeReports:

    def test_pages_concatenated(self, company, stock_items, finance_entries):
        stock_pdf = reports.build_stock_report(stock_items, company)
        finance_pdf = reports.build_finance_report(finance_entries, company)

        pack = reports.merge_reports([stock_pdf, finance_pdf])
        text = pdf_text(pack)

        assert page_count(pack) == page_count(stock_pdf) + page_count(finance_pdf)
        assert text.index("Inventory Report") < text.index("Financial Report")

    def test_nothing_to_merge(self):
        with pytest.raises(ValueError):
            reports.merge_reports([])


class TestCsvExport:

    def test_stock_csv(self, stock_items):
        rows = list(csv.reader(io.StringIO(csv_export.stock_csv(stock_items))))

        assert rows[0] == list(reports.STOCK_COLUMNS)
        assert rows[1] == ["MacBook Air", "Laptop", "0", "2", "Out of Stock", "Apple LK", "Rs. 250,000.00"]
        assert len(rows) == 3

    def test_finance_csv_signed_amounts(self, finance_entries):
        rows = list(csv.reader(io.StringIO(csv_export.finance_csv(finance_entries))))
        assert [row[-1] for row in rows[1:]] == ["+Rs. 1,000.00", "-Rs. 400.00"]

    def test_export_names(self):
        assert csv_export.export_names() == ["finance", "offers", "orders", "stock"]
