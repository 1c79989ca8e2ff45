"""
Display and input formatting for money, dates and payment slips.

Prices are shown in Sri Lankan rupees as "Rs. 1,234.50". Price inputs are
re-formatted as the user types (thousands separators, at most two decimals)
and parsed back by stripping the separators.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Optional, Union

from core.exceptions import ValidationError

Number = Union[int, float]

CURRENCY_PREFIX = "Rs."

_NON_PRICE_CHARS = re.compile(r"[^\d.]")
_THOUSANDS = re.compile(r"\B(?=(\d{3})+(?!\d))")

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp")


def format_price(amount: Optional[Number]) -> str:
    """
    Format a rupee amount for display.

    >>> format_price(1234.5)
    'Rs. 1,234.50'
    >>> format_price(None)
    'Rs. 0.00'
    """
    if amount is None:
        amount = 0
    return f"{CURRENCY_PREFIX} {amount:,.2f}"


def format_signed_price(amount: Number, income: bool) -> str:
    """Ledger style: "+Rs. 500.00" / "-Rs. 500.00"."""
    sign = "+" if income else "-"
    return f"{sign}{format_price(abs(amount))}"


def format_price_input(raw: Optional[str]) -> str:
    """
    Normalize what a user typed into a price field.

    Strips everything but digits and dots, groups thousands in the integer
    part and truncates the decimals to two digits.

    >>> format_price_input("Rs 1234567.891")
    '1,234,567.89'
    """
    clean = _NON_PRICE_CHARS.sub("", raw or "")
    parts = clean.split(".")
    integer_part = _THOUSANDS.sub(",", parts[0])
    decimal_part = parts[1][:2] if len(parts) > 1 else ""

    if decimal_part:
        return f"{integer_part}.{decimal_part}"
    return integer_part


def parse_price(formatted: Optional[str], field: str = "price") -> float:
    """
    Inverse of format_price_input.

    Raises:
        ValidationError: If nothing numeric remains, or the number is not
            finite ("nan", "inf", "1e400")
    """
    value = (formatted or "").replace(",", "").strip()
    try:
        number = float(value)
    except ValueError:
        raise ValidationError({field: "Please enter a valid price"})
    if not math.isfinite(number):
        raise ValidationError({field: "Please enter a valid price"})
    return number


def format_date(value: Optional[datetime], with_time: bool = False) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M" if with_time else "%Y-%m-%d")


def slip_url(base_url: str, path: Optional[str]) -> str:
    """
    Absolute URL of an uploaded payment slip.

    Backend paths like "uploads/slip.png" are served from the API host;
    absolute URLs are returned unchanged. Empty when there is no slip.
    """
    if not path:
        return ""
    if path.startswith("http"):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def is_image(path: Optional[str]) -> bool:
    return bool(path) and path.lower().endswith(IMAGE_EXTENSIONS)
