"""
Form validation for every create/update form.

Each ``validate_*`` function takes the submitted form (a werkzeug MultiDict
or any mapping), sanitizes free text with bleach, and either returns the
JSON payload to send to the backend or raises ValidationError carrying a
message per offending field. Nothing here touches the network.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

import bleach

from core.exceptions import ValidationError
from models.finance import ENTRY_TYPES, FINANCE_CATEGORIES
from models.feedback import MAX_RATING, MIN_RATING
from models.stock import REORDER_CATEGORIES, REORDER_PRIORITIES, STOCK_CATEGORIES
from .formatting import parse_price

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 1000
MAX_COMMENT_LENGTH = 1000

_LETTERS_AND_SPACES = re.compile(r"^[A-Za-z ]+$")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def sanitize_text(text: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Strip whitespace and any HTML from user input.

    Args:
        text: Raw input text
        max_length: Optional maximum length to enforce

    Returns:
        Sanitized text safe for storage and display
    """
    if not text:
        return ""
    text = text.strip()
    text = bleach.clean(text, tags=[], strip=True)
    if max_length and len(text) > max_length:
        text = text[:max_length]
    return text


def _int_field(form: Mapping[str, Any], name: str, label: str, minimum: int,
               errors: Dict[str, str]) -> int:
    raw = str(form.get(name, "") or "").strip()
    try:
        value = int(raw)
    except ValueError:
        errors[name] = f"{label} must be a whole number"
        return 0
    if value < minimum:
        errors[name] = f"{label} must be at least {minimum}"
    return value


def _price_field(form: Mapping[str, Any], name: str, label: str, errors: Dict[str, str]) -> float:
    try:
        value = parse_price(form.get(name), field=name)
    except ValidationError:
        errors[name] = f"{label} must be a number"
        return 0.0
    if value < 0:
        errors[name] = f"{label} cannot be negative"
    return value


def _choice(form: Mapping[str, Any], name: str, label: str, choices, errors: Dict[str, str],
            default: Optional[str] = None) -> str:
    value = sanitize_text(form.get(name)) or (default or "")
    if value not in choices:
        errors[name] = f"Please select a valid {label.lower()}"
    return value


def _raise_if(errors: Dict[str, str]) -> None:
    if errors:
        raise ValidationError(errors)


# =============================================================================
# INVENTORY
# =============================================================================

def validate_stock_form(form: Mapping[str, Any]) -> Dict[str, Any]:
    """Stock create/update -> POST/PUT /api/admin/auth/stocks body."""
    errors: Dict[str, str] = {}

    name = sanitize_text(form.get("name"), MAX_NAME_LENGTH)
    if not name:
        errors["name"] = "Name is required"
    elif not _LETTERS_AND_SPACES.match(name):
        errors["name"] = "Name can only contain letters and spaces"

    category = _choice(form, "category", "Category", STOCK_CATEGORIES, errors)
    quantity = _int_field(form, "quantity", "Quantity", 0, errors)
    reorder_level = _int_field(form, "reorderLevel", "Reorder level", 0, errors)

    supplier = sanitize_text(form.get("supplier"), MAX_NAME_LENGTH)
    if not supplier:
        errors["supplier"] = "Supplier is required"

    payload: Dict[str, Any] = {
        "name": name,
        "category": category,
        "quantity": quantity,
        "reorderLevel": reorder_level,
        "supplier": supplier,
        "description": sanitize_text(form.get("description"), MAX_DESCRIPTION_LENGTH),
    }
    if str(form.get("price", "") or "").strip():
        payload["price"] = _price_field(form, "price", "Price", errors)

    _raise_if(errors)
    return payload


def validate_reorder_form(form: Mapping[str, Any]) -> Dict[str, Any]:
    """Reorder request -> POST/PUT /api/reorders body."""
    errors: Dict[str, str] = {}

    title = sanitize_text(form.get("title"))
    if not 3 <= len(title) <= 100:
        errors["title"] = "Title must be between 3 and 100 characters"

    quantity = _int_field(form, "quantity", "Quantity", 1, errors)
    category = _choice(form, "category", "Category", REORDER_CATEGORIES, errors)
    priority = _choice(form, "priority", "Priority", REORDER_PRIORITIES, errors, default="Normal")

    description = sanitize_text(form.get("description"))
    if not 10 <= len(description) <= 500:
        errors["description"] = "Description must be between 10 and 500 characters"

    _raise_if(errors)
    return {
        "title": title,
        "quantity": quantity,
        "category": category,
        "priority": priority,
        "description": description,
    }


# =============================================================================
# SUPPLIER OFFERS
# =============================================================================

def validate_offer_form(form: Mapping[str, Any], today: Optional[date] = None) -> Dict[str, Any]:
    """
    Supplier offer -> POST /api/offer or PUT /api/offer/{id} body.

    Args:
        form: Submitted form; pricePerUnit may carry thousands separators
        today: Reference date for the "not in the past" rule (tests pin it)
    """
    errors: Dict[str, str] = {}
    today = today or date.today()

    title = sanitize_text(form.get("title"), MAX_NAME_LENGTH)
    if not title:
        errors["title"] = "Title is required"

    description = sanitize_text(form.get("description"), MAX_DESCRIPTION_LENGTH)
    if not description:
        errors["description"] = "Description is required"

    price = _price_field(form, "pricePerUnit", "Price per unit", errors)
    quantity = _int_field(form, "quantityOffered", "Quantity", 1, errors)

    raw_date = str(form.get("deliveryDate", "") or "").strip()
    delivery_date = None
    if not raw_date:
        errors["deliveryDate"] = "Delivery date is required"
    else:
        try:
            delivery_date = datetime.strptime(raw_date, "%Y-%m-%d").date()
        except ValueError:
            errors["deliveryDate"] = "Delivery date must be YYYY-MM-DD"
        else:
            if delivery_date < today:
                errors["deliveryDate"] = "Delivery date cannot be in the past"

    _raise_if(errors)
    return {
        "title": title,
        "description": description,
        "pricePerUnit": price,
        "quantityOffered": quantity,
        "deliveryDate": delivery_date.isoformat(),
    }


# =============================================================================
# FINANCE / FEEDBACK
# =============================================================================

def validate_finance_form(form: Mapping[str, Any]) -> Dict[str, Any]:
    """Finance entry -> POST /api/finance body."""
    errors: Dict[str, str] = {}

    entry_type = _choice(form, "type", "Type", ENTRY_TYPES, errors)
    amount = _price_field(form, "amount", "Amount", errors)

    description = sanitize_text(form.get("description"), MAX_DESCRIPTION_LENGTH)
    if not description:
        errors["description"] = "Description is required"

    category = _choice(form, "category", "Category", FINANCE_CATEGORIES, errors, default="General")

    payload: Dict[str, Any] = {
        "type": entry_type,
        "amount": amount,
        "description": description,
        "category": category,
    }
    raw_date = str(form.get("date", "") or "").strip()
    if raw_date:
        try:
            payload["date"] = datetime.strptime(raw_date, "%Y-%m-%d").date().isoformat()
        except ValueError:
            errors["date"] = "Date must be YYYY-MM-DD"

    _raise_if(errors)
    return payload


def validate_feedback_form(form: Mapping[str, Any]) -> Dict[str, Any]:
    """Customer feedback -> POST /api/feedback body."""
    errors: Dict[str, str] = {}

    name = sanitize_text(form.get("name"), MAX_NAME_LENGTH)
    if not name:
        errors["name"] = "Name is required"

    rating = _int_field(form, "rating", "Rating", MIN_RATING, errors)
    if "rating" not in errors and rating > MAX_RATING:
        errors["rating"] = f"Rating must be between {MIN_RATING} and {MAX_RATING}"

    comment = sanitize_text(form.get("comment"), MAX_COMMENT_LENGTH)
    if not comment:
        errors["comment"] = "Comment is required"

    _raise_if(errors)
    return {"name": name, "rating": rating, "comment": comment}


# =============================================================================
# AUTH
# =============================================================================

def validate_login_form(form: Mapping[str, Any]) -> Dict[str, str]:
    """Login -> {"email", "password"}; the password is passed through untouched."""
    errors: Dict[str, str] = {}

    email = sanitize_text(form.get("email"), 254).lower()
    if not email:
        errors["email"] = "Email is required"
    elif not _EMAIL.match(email):
        errors["email"] = "Please enter a valid email address"

    password = form.get("password") or ""
    if not password:
        errors["password"] = "Password is required"

    _raise_if(errors)
    return {"email": email, "password": password}
