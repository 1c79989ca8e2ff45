"""
Supplier offer lifecycle.

    Supplier: create, list own, edit / delete while Pending
    Admin:    list all, approve or reject a Pending offer

Decided offers are terminal. The transition is checked locally with
SupplierOffer.decide() before any request is sent, so an illegal action
never reaches the backend.
"""

from __future__ import annotations

from typing import Any, Dict, List

from core.api_client import MarketplaceAPIClient
from core.exceptions import InvalidTransitionError
from models import fields
from models.offer import SupplierOffer
from logging_config import get_logger


logger = get_logger(__name__)

OFFERS_PATH = "/api/offer"


class OfferService:

    def __init__(self, api_client: MarketplaceAPIClient):
        self._api = api_client

    def list_offers(self) -> List[SupplierOffer]:
        """All offers (admin)."""
        return SupplierOffer.list_from(self._api.get(OFFERS_PATH))

    def list_my_offers(self) -> List[SupplierOffer]:
        """Offers of the logged-in supplier."""
        return SupplierOffer.list_from(self._api.get(f"{OFFERS_PATH}/my-offers"))

    def create_offer(self, payload: Dict[str, Any]) -> SupplierOffer:
        offer = SupplierOffer.from_mutation(self._api.post(OFFERS_PATH, json=payload))
        logger.info(f"Supplier offer '{offer.title}' created")
        return offer

    def update_offer(self, offer: SupplierOffer, payload: Dict[str, Any]) -> SupplierOffer:
        """
        Raises:
            InvalidTransitionError: If the offer is no longer Pending
        """
        if not offer.can_edit:
            raise InvalidTransitionError("offer", offer.status.value, "edit")
        return SupplierOffer.from_mutation(self._api.put(f"{OFFERS_PATH}/{offer.id}", json=payload))

    def delete_offer(self, offer: SupplierOffer) -> str:
        """
        Raises:
            InvalidTransitionError: If the offer is no longer Pending
        """
        if not offer.can_edit:
            raise InvalidTransitionError("offer", offer.status.value, "delete")
        response = self._api.delete(f"{OFFERS_PATH}/{offer.id}")
        return fields.message_of(response, "Offer deleted")

    def decide(self, offer: SupplierOffer, action: str) -> SupplierOffer:
        """
        Approve or reject a Pending offer.

        Args:
            offer: Latest known copy of the offer
            action: "approve" or "reject"

        Raises:
            InvalidTransitionError: Offer already decided or unknown action
        """
        expected = offer.decide(action)
        logger.info(f"Offer {offer.id}: {action} -> {expected.value}")
        response = self._api.patch(f"{OFFERS_PATH}/{offer.id}/{action}")
        return SupplierOffer.from_mutation(response)

    def find(self, offers: List[SupplierOffer], offer_id: str) -> SupplierOffer:
        """
        Raises:
            KeyError: If no offer has that id
        """
        for offer in offers:
            if offer.id == offer_id:
                return offer
        raise KeyError(offer_id)
