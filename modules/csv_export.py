"""
CSV exports of the admin list views.

Rows are the same detail rows the PDF reports print (see modules.reports),
so a filtered table exports identically in both formats.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable, List, Sequence

from .reports import (
    finance_rows, FINANCE_COLUMNS,
    offer_rows, OFFER_COLUMNS,
    order_rows, ORDER_COLUMNS,
    stock_rows, STOCK_COLUMNS,
)


def to_csv(columns: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(columns)
    writer.writerows(rows)
    return buffer.getvalue()


def stock_csv(items) -> str:
    return to_csv(STOCK_COLUMNS, stock_rows(items))


def offers_csv(offers) -> str:
    return to_csv(OFFER_COLUMNS, offer_rows(offers))


def finance_csv(entries) -> str:
    return to_csv(FINANCE_COLUMNS, finance_rows(entries))


def orders_csv(orders) -> str:
    return to_csv(ORDER_COLUMNS, order_rows(orders))


EXPORTERS = {
    "stock": stock_csv,
    "offers": offers_csv,
    "finance": finance_csv,
    "orders": orders_csv,
}


def export_names() -> List[str]:
    return sorted(EXPORTERS)
