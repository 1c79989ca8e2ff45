"""
Finance ledger model.

Entries are append-only from the back office: there is no edit or delete.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.exceptions import ResponseSchemaError
from . import fields

INCOME = "Income"
EXPENSE = "Expense"
ENTRY_TYPES = (INCOME, EXPENSE)

FINANCE_CATEGORIES = (
    "Salary", "Freelance", "Investment", "Shopping", "Food",
    "Transport", "Entertainment", "Bills", "General",
)


@dataclass(frozen=True)
class FinanceEntry:
    """One income or expense line."""

    id: str
    type: str
    amount: float
    description: str
    category: str = "General"
    date: Optional[datetime] = None

    @property
    def is_income(self) -> bool:
        return self.type == INCOME

    @property
    def signed_amount(self) -> float:
        """Positive for income, negative for expenses."""
        return self.amount if self.is_income else -self.amount

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FinanceEntry":
        data = fields.require_mapping(data, "FinanceEntry")
        entry_type = fields.text(data, "type", "FinanceEntry", default=None)
        if entry_type not in ENTRY_TYPES:
            raise ResponseSchemaError("FinanceEntry", f"unknown type {entry_type!r}")

        return cls(
            id=fields.identifier(data, "FinanceEntry", required=False),
            type=entry_type,
            amount=fields.number(data, "amount", "FinanceEntry", default=None),
            description=fields.text(data, "description", "FinanceEntry"),
            category=fields.text(data, "category", "FinanceEntry", default="General"),
            date=fields.timestamp(data, "date", "FinanceEntry"),
        )

    @classmethod
    def list_from(cls, payload: Any) -> List["FinanceEntry"]:
        return [cls.from_dict(e) for e in fields.require_list(payload, "Finance list")]

    @classmethod
    def from_mutation(cls, payload: Any) -> "FinanceEntry":
        """POST /api/finance answers {"message": ..., "entry": {...}}."""
        if isinstance(payload, dict) and "entry" in payload:
            payload = payload["entry"]
        return cls.from_dict(payload)
