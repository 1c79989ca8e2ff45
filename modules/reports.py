"""
PDF reports for the admin list views.

Every report has the same three blocks:
    1. Company header (name, address, contact) and generation time
    2. Summary table computed from the collection (modules.summaries)
    3. Detail table, one row per record; reportlab flows it over pages

Reports are built from whatever collection the caller passes, normally the
currently filtered list, and returned as PDF bytes. Several reports can be
merged into one back-office pack with pypdf.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from pypdf import PdfReader, PdfWriter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from models.finance import FinanceEntry
from models.offer import SupplierOffer
from models.order import Order
from models.stock import StockItem
from .formatting import format_date, format_price, format_signed_price
from .summaries import summarize_finance, summarize_offers, summarize_orders, summarize_stock
from logging_config import get_logger


logger = get_logger(__name__)

HEADER_COLOR = colors.HexColor("#1e3a8a")
HEADER_TEXT = colors.white
ZEBRA_COLOR = colors.HexColor("#eef4ff")
MAX_CELL_CHARS = 40

SummaryRows = List[Tuple[str, str]]


@dataclass(frozen=True)
class CompanyInfo:
    """Letterhead printed on every report."""

    name: str
    address: str
    contact: str
    email: str

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "CompanyInfo":
        return cls(
            name=config["COMPANY_NAME"],
            address=config["COMPANY_ADDRESS"],
            contact=config["COMPANY_CONTACT"],
            email=config["COMPANY_EMAIL"],
        )


def _clip(value: str, limit: int = MAX_CELL_CHARS) -> str:
    return value if len(value) <= limit else value[: limit - 3] + "..."


# =============================================================================
# DETAIL ROWS (shared with modules.csv_export)
# =============================================================================

STOCK_COLUMNS = ("Name", "Category", "Quantity", "Reorder Level", "Status", "Supplier", "Unit Price")
OFFER_COLUMNS = ("Title", "Supplier", "Price / Unit", "Quantity", "Total", "Delivery Date", "Status")
FINANCE_COLUMNS = ("Date", "Type", "Category", "Description", "Amount")
ORDER_COLUMNS = ("Order #", "Customer", "Items", "Total", "Payment", "Status", "Delivery", "Date")


def stock_rows(items: Iterable[StockItem]) -> List[List[str]]:
    return [
        [item.name, item.category, str(item.quantity), str(item.reorder_level),
         item.status, item.supplier, format_price(item.unit_price)]
        for item in items
    ]


def offer_rows(offers: Iterable[SupplierOffer]) -> List[List[str]]:
    return [
        [offer.title, offer.supplier.display_name, format_price(offer.price_per_unit),
         str(offer.quantity_offered), format_price(offer.total_value),
         format_date(offer.delivery_date), offer.status.value]
        for offer in offers
    ]


def finance_rows(entries: Iterable[FinanceEntry]) -> List[List[str]]:
    return [
        [format_date(entry.date), entry.type, entry.category, entry.description,
         format_signed_price(entry.amount, entry.is_income)]
        for entry in entries
    ]


def order_rows(orders: Iterable[Order]) -> List[List[str]]:
    return [
        [order.order_number, order.customer.username or order.customer.email, order.item_names,
         format_price(order.total), order.payment_label, order.status_label,
         order.delivery_method, format_date(order.created_at)]
        for order in orders
    ]


# =============================================================================
# DOCUMENT BUILDER
# =============================================================================

def build_report(
    title: str,
    company: CompanyInfo,
    summary: SummaryRows,
    columns: Sequence[str],
    rows: List[List[str]],
    generated_at: Optional[datetime] = None,
) -> bytes:
    """
    Lay out one report and return the PDF bytes.

    Args:
        title: Report title, also used as PDF metadata title
        company: Letterhead
        summary: (label, value) pairs for the summary block
        columns: Detail table header
        rows: Detail rows, already formatted as strings
        generated_at: Timestamp printed in the header (defaults to now)
    """
    generated_at = generated_at or datetime.now()

    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=landscape(A4),
        leftMargin=24,
        rightMargin=24,
        topMargin=60,
        bottomMargin=30,
        title=title,
        author=company.name,
    )

    styles = getSampleStyleSheet()
    elements: List[Any] = [
        Paragraph(company.name, styles["Title"]),
        Paragraph(f"{company.address} | {company.contact} | {company.email}", styles["Normal"]),
        Spacer(1, 10),
        Paragraph(title, styles["Heading2"]),
        Spacer(1, 6),
    ]

    if summary:
        summary_table = Table([[label, value] for label, value in summary], hAlign="LEFT")
        summary_table.setStyle(TableStyle([
            ("GRID", (0, 0), (-1, -1), 0.3, colors.grey),
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("BACKGROUND", (0, 0), (0, -1), ZEBRA_COLOR),
        ]))
        elements.append(summary_table)
        elements.append(Spacer(1, 12))

    data: List[List[str]] = [list(columns)]
    if rows:
        data.extend([_clip(cell) for cell in row] for row in rows)
    else:
        data.append(["No records for the selected filters."] + [""] * (len(columns) - 1))

    detail = Table(data, repeatRows=1)
    ts = TableStyle([
        ("GRID", (0, 0), (-1, -1), 0.3, colors.grey),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOR),
        ("TEXTCOLOR", (0, 0), (-1, 0), HEADER_TEXT),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ])
    if not rows:
        ts.add("SPAN", (0, 1), (-1, 1))
    for i in range(2, len(data), 2):
        ts.add("BACKGROUND", (0, i), (-1, i), ZEBRA_COLOR)
    detail.setStyle(ts)
    elements.append(detail)

    stamp = "Generated: " + generated_at.strftime("%Y-%m-%d %H:%M")

    def _page_header(canvas, doc_obj):
        canvas.saveState()
        pw, ph = doc_obj.pagesize
        canvas.setFont("Helvetica-Bold", 9)
        canvas.drawString(24, ph - 36, f"{company.name} - {title}")
        canvas.setFont("Helvetica", 8)
        canvas.drawRightString(pw - 24, ph - 36, stamp)
        canvas.drawRightString(pw - 24, 16, f"Page {doc_obj.page}")
        canvas.restoreState()

    doc.build(elements, onFirstPage=_page_header, onLaterPages=_page_header)

    pdf_bytes = buf.getvalue()
    buf.close()
    logger.info(f"Built '{title}' report: {len(rows)} rows, {len(pdf_bytes)} bytes")
    return pdf_bytes


# =============================================================================
# REPORTS
# =============================================================================

def build_stock_report(items: Iterable[StockItem], company: CompanyInfo,
                       generated_at: Optional[datetime] = None) -> bytes:
    items = list(items)
    s = summarize_stock(items)
    summary: SummaryRows = [
        ("Total Items", str(s.total_items)),
        ("Total Units", str(s.total_units)),
        ("Stock Value", format_price(s.total_value)),
    ]
    summary += [(status, str(count)) for status, count in s.by_status.items()]
    summary += [(f"Units: {category}", str(units)) for category, units in s.units_by_category.items()]
    return build_report("Inventory Report", company, summary, STOCK_COLUMNS, stock_rows(items), generated_at)


def build_offer_report(offers: Iterable[SupplierOffer], company: CompanyInfo,
                       generated_at: Optional[datetime] = None) -> bytes:
    offers = list(offers)
    s = summarize_offers(offers)
    summary: SummaryRows = [("Total Offers", str(s.total)), ("Total Value", format_price(s.total_value))]
    summary += [(status, str(count)) for status, count in s.by_status.items()]
    return build_report("Supplier Offers Report", company, summary, OFFER_COLUMNS, offer_rows(offers), generated_at)


def build_finance_report(entries: Iterable[FinanceEntry], company: CompanyInfo,
                         generated_at: Optional[datetime] = None) -> bytes:
    entries = list(entries)
    s = summarize_finance(entries)
    summary: SummaryRows = [
        ("Balance", format_price(s.balance)),
        ("Total Income", format_price(s.total_income)),
        ("Total Expenses", format_price(s.total_expenses)),
        ("Savings Rate", f"{s.savings_rate:.1f}%"),
    ]
    return build_report("Financial Report", company, summary, FINANCE_COLUMNS, finance_rows(entries), generated_at)


def build_order_report(orders: Iterable[Order], company: CompanyInfo,
                       generated_at: Optional[datetime] = None) -> bytes:
    orders = list(orders)
    s = summarize_orders(orders)
    summary: SummaryRows = [("Orders", str(s.count)), ("Revenue", format_price(s.revenue))]
    summary += [(status.replace("_", " ").title(), str(count)) for status, count in sorted(s.by_status.items())]
    return build_report("Orders Report", company, summary, ORDER_COLUMNS, order_rows(orders), generated_at)


def merge_reports(pdfs: Sequence[bytes]) -> bytes:
    """
    Concatenate report PDFs into a single back-office pack.

    Raises:
        ValueError: If no PDFs are given
    """
    if not pdfs:
        raise ValueError("No reports to merge")

    writer = PdfWriter()
    for pdf in pdfs:
        reader = PdfReader(io.BytesIO(pdf))
        for page in reader.pages:
            writer.add_page(page)

    out = io.BytesIO()
    writer.write(out)
    logger.info(f"Merged {len(pdfs)} reports into pack of {len(writer.pages)} pages")
    return out.getvalue()
