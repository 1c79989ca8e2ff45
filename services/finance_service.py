"""Finance ledger and feedback moderation endpoints."""

from __future__ import annotations

from typing import Any, Dict, List

from core.api_client import MarketplaceAPIClient
from models import fields
from models.feedback import Feedback
from models.finance import FinanceEntry
from logging_config import get_logger


logger = get_logger(__name__)


class FinanceService:
    """Append-only income / expense ledger."""

    def __init__(self, api_client: MarketplaceAPIClient):
        self._api = api_client

    def list_entries(self) -> List[FinanceEntry]:
        return FinanceEntry.list_from(self._api.get("/api/finance"))

    def add_entry(self, payload: Dict[str, Any]) -> FinanceEntry:
        entry = FinanceEntry.from_mutation(self._api.post("/api/finance", json=payload))
        logger.info(f"Recorded {entry.type.lower()} of {entry.amount:.2f} ({entry.category})")
        return entry


class FeedbackService:
    """
    Customer feedback.

    Listing and submitting are anonymous; deleting needs the admin token.
    """

    def __init__(self, api_client: MarketplaceAPIClient):
        self._api = api_client

    def list_feedback(self) -> List[Feedback]:
        return Feedback.list_from(self._api.get("/api/feedback", auth=False))

    def submit_feedback(self, payload: Dict[str, Any]) -> Feedback:
        return Feedback.from_dict(self._api.post("/api/feedback", json=payload, auth=False))

    def delete_feedback(self, feedback_id: str) -> str:
        response = self._api.delete(f"/api/feedback/{feedback_id}")
        logger.info(f"Deleted feedback {feedback_id}")
        return fields.message_of(response, "Feedback deleted")
