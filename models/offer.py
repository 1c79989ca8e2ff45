"""
Supplier offer model.

Lifecycle:
    Pending -> Approved   (admin approve)
    Pending -> Rejected   (admin reject)

Approved and Rejected are terminal: no action is exposed once decided.
Suppliers may edit or withdraw their own offer only while it is Pending.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from core.exceptions import InvalidTransitionError, ResponseSchemaError
from . import fields


class OfferStatus(Enum):
    """Status of a supplier offer."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


APPROVE = "approve"
REJECT = "reject"

# action -> resulting status, valid only from PENDING
_DECISIONS = {
    APPROVE: OfferStatus.APPROVED,
    REJECT: OfferStatus.REJECTED,
}


@dataclass(frozen=True)
class SupplierRef:
    """Supplier as populated by the backend (or just an id)."""

    id: str
    username: str = ""
    email: str = ""
    company: str = ""

    @property
    def display_name(self) -> str:
        return self.company or self.username or self.email or self.id

    @classmethod
    def from_value(cls, value: Any) -> "SupplierRef":
        if isinstance(value, dict):
            return cls(
                id=fields.identifier(value, "Supplier", required=False),
                username=fields.text(value, "username", "Supplier"),
                email=fields.text(value, "email", "Supplier"),
                company=fields.text(value, "company", "Supplier"),
            )
        return cls(id=str(value or ""))


@dataclass(frozen=True)
class SupplierOffer:
    """A supplier's proposal to sell a quantity of goods at a price."""

    id: str
    title: str
    description: str
    price_per_unit: float
    quantity_offered: int
    status: OfferStatus
    supplier: SupplierRef
    delivery_date: Optional[datetime] = None
    decision_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def total_value(self) -> float:
        return self.price_per_unit * self.quantity_offered

    @property
    def is_pending(self) -> bool:
        return self.status is OfferStatus.PENDING

    @property
    def available_actions(self) -> Tuple[str, ...]:
        """Admin actions exposed for this offer; empty once decided."""
        if self.is_pending:
            return (APPROVE, REJECT)
        return ()

    @property
    def can_edit(self) -> bool:
        return self.is_pending

    def decide(self, action: str) -> OfferStatus:
        """
        Resulting status for an admin decision.

        Raises:
            InvalidTransitionError: If the offer is already decided or the
                action is unknown
        """
        if action not in _DECISIONS or not self.is_pending:
            raise InvalidTransitionError("offer", self.status.value, action)
        return _DECISIONS[action]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SupplierOffer":
        data = fields.require_mapping(data, "SupplierOffer")
        raw_status = fields.text(data, "status", "SupplierOffer", default="Pending")
        try:
            status = OfferStatus(raw_status)
        except ValueError:
            raise ResponseSchemaError("SupplierOffer", f"unknown status {raw_status!r}")

        return cls(
            id=fields.identifier(data, "SupplierOffer"),
            title=fields.text(data, "title", "SupplierOffer", default=None),
            description=fields.text(data, "description", "SupplierOffer"),
            price_per_unit=fields.number(data, "pricePerUnit", "SupplierOffer", default=None),
            quantity_offered=fields.integer(data, "quantityOffered", "SupplierOffer", default=None),
            status=status,
            supplier=SupplierRef.from_value(data.get("supplierId")),
            delivery_date=fields.timestamp(data, "deliveryDate", "SupplierOffer"),
            decision_at=fields.timestamp(data, "decisionAt", "SupplierOffer"),
            created_at=fields.timestamp(data, "createdAt", "SupplierOffer"),
        )

    @classmethod
    def list_from(cls, payload: Any) -> List["SupplierOffer"]:
        """Accepts a bare list or the admin listing's {"offers": [...]} wrapper."""
        if isinstance(payload, dict) and "offers" in payload:
            payload = payload["offers"]
        return [cls.from_dict(o) for o in fields.require_list(payload, "Offer list")]

    @classmethod
    def from_mutation(cls, payload: Any) -> "SupplierOffer":
        """Mutations answer {"message": ..., "offer": {...}}."""
        if isinstance(payload, dict) and "offer" in payload:
            payload = payload["offer"]
        return cls.from_dict(payload)
