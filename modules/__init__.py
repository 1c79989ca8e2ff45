"""Helper modules for the ReBuy Web application."""

__all__ = [
    "csv_export",
    "formatting",
    "list_filters",
    "order_filter",
    "reports",
    "summaries",
    "validation",
]
