"""
Unit tests for boundary parsing of backend payloads into models.
"""

import pytest

from core.exceptions import InvalidTransitionError, ResponseSchemaError
from core.session import ADMIN_SCOPE, USER_SCOPE
from models.feedback import Feedback
from models.finance import FinanceEntry
from models.offer import OfferStatus, SupplierOffer
from models.order import Order
from models.stock import ReorderRequest, StockItem, derive_stock_status
from models.user import parse_admin_login, parse_user_login


@pytest.fixture
def offer_payload():
    def _make(**overrides):
        data = {
            "_id": "off-1",
            "title": "Refurbished ThinkPads",
            "description": "Grade A units",
            "pricePerUnit": 85000,
            "quantityOffered": 10,
            "deliveryDate": "2030-02-01T00:00:00.000Z",
            "status": "Pending",
            "supplierId": {"_id": "sup-1", "username": "kamal", "company": "Kamal Traders"},
        }
        data.update(overrides)
        return data
    return _make


class TestOrder:

    def test_parses_backend_order(self, order_payload):
        order = Order.from_dict(order_payload(paymentSlip={"url": "uploads/slip.png"}))

        assert order.order_number == "ORD-b2c3"
        assert order.customer.email == "nimal@example.com"
        assert order.items[0].unit_price == 95000.0
        assert order.address.one_line() == "12 Galle Road, Colombo, 00300, Sri Lanka"
        assert order.slip_url == "uploads/slip.png"
        assert order.created_at.year == 2025
        assert order.status_label == "Confirmed"
        assert not order.has_carrier

    def test_missing_id_rejected(self, order_payload):
        data = order_payload()
        del data["_id"]
        with pytest.raises(ResponseSchemaError):
            Order.from_dict(data)

    def test_non_numeric_total_rejected(self, order_payload):
        with pytest.raises(ResponseSchemaError):
            Order.from_dict(order_payload(total="lots"))

    def test_list_requires_list(self):
        with pytest.raises(ResponseSchemaError):
            Order.list_from({"orders": []})

    def test_status_history(self, order_payload):
        order = Order.from_dict(order_payload(history=[
            {"status": "pending", "updatedAt": "2025-01-05T10:00:00.000Z", "updatedBy": "system"},
            {"status": "confirmed", "note": "Payment verified"},
        ]))

        assert [h.status for h in order.history] == ["pending", "confirmed"]
        assert order.history[0].updated_by == "system"
        assert order.history[1].note == "Payment verified"

    @pytest.mark.parametrize("entry", ["shipped", None, 3, ["confirmed"]])
    def test_malformed_history_entry_rejected(self, order_payload, entry):
        with pytest.raises(ResponseSchemaError):
            Order.from_dict(order_payload(history=[{"status": "pending"}, entry]))


class TestStockStatus:
    """Out of Stock at zero, Low Stock up to the reorder level, else In Stock."""

    @pytest.mark.parametrize("quantity,reorder_level,expected", [
        (0, 10, "Out of Stock"),
        (5, 10, "Low Stock"),
        (10, 10, "Low Stock"),
        (20, 10, "In Stock"),
        (0, 0, "Out of Stock"),
    ])
    def test_derive(self, quantity, reorder_level, expected):
        assert derive_stock_status(quantity, reorder_level) == expected

    def test_item_status_and_value(self):
        item = StockItem.from_dict({
            "_id": "s1", "name": "Pixel", "category": "Smartphone",
            "quantity": 4, "reorderLevel": 5, "supplier": "ACME", "price": "1500.50",
        })
        assert item.status == "Low Stock"
        assert item.stock_value == pytest.approx(6002.0)

    def test_negative_quantity_rejected(self):
        with pytest.raises(ResponseSchemaError):
            StockItem.from_dict({"_id": "s1", "name": "Pixel", "quantity": -1})

    def test_reorder_summary(self):
        request = ReorderRequest.from_dict({
            "_id": "r1", "title": "Phones", "quantity": 25, "category": "Mobile Phones",
            "description": "Restock for season", "priority": "High",
        })
        assert request.summary == "Phones (25 units) - Priority: High"


class TestSupplierOffer:
    """Pending -> Approved | Rejected; decided offers are terminal."""

    def test_pending_exposes_both_actions(self, offer_payload):
        offer = SupplierOffer.from_dict(offer_payload())

        assert offer.available_actions == ("approve", "reject")
        assert offer.can_edit
        assert offer.supplier.display_name == "Kamal Traders"
        assert offer.total_value == 850000

    @pytest.mark.parametrize("action,result", [
        ("approve", OfferStatus.APPROVED),
        ("reject", OfferStatus.REJECTED),
    ])
    def test_decide(self, offer_payload, action, result):
        assert SupplierOffer.from_dict(offer_payload()).decide(action) is result

    @pytest.mark.parametrize("status", ["Approved", "Rejected"])
    def test_decided_is_terminal(self, offer_payload, status):
        offer = SupplierOffer.from_dict(offer_payload(status=status))

        assert offer.available_actions == ()
        assert not offer.can_edit
        with pytest.raises(InvalidTransitionError):
            offer.decide("approve")

    def test_unknown_action(self, offer_payload):
        with pytest.raises(InvalidTransitionError):
            SupplierOffer.from_dict(offer_payload()).decide("archive")

    def test_unknown_status_rejected(self, offer_payload):
        with pytest.raises(ResponseSchemaError):
            SupplierOffer.from_dict(offer_payload(status="Maybe"))

    def test_list_accepts_offers_wrapper(self, offer_payload):
        offers = SupplierOffer.list_from({"offers": [offer_payload(), offer_payload(_id="off-2")]})
        assert [o.id for o in offers] == ["off-1", "off-2"]

    def test_supplier_as_plain_id(self, offer_payload):
        offer = SupplierOffer.from_mutation({"message": "ok", "offer": offer_payload(supplierId="sup-9")})
        assert offer.supplier.display_name == "sup-9"


class TestFinanceAndFeedback:

    def test_signed_amount(self):
        income = FinanceEntry.from_dict({"type": "Income", "amount": 500, "description": "Sale"})
        expense = FinanceEntry.from_dict({"type": "Expense", "amount": 200, "description": "Rent"})

        assert income.signed_amount == 500
        assert expense.signed_amount == -200
        assert income.category == "General"

    def test_unknown_entry_type(self):
        with pytest.raises(ResponseSchemaError):
            FinanceEntry.from_dict({"type": "Refund", "amount": 1})

    def test_feedback_stars(self):
        fb = Feedback.from_dict({"_id": "f1", "name": "Ama", "comment": "Great", "rating": 4})
        assert fb.author == "Ama"
        assert fb.stars == "★★★★☆"

    @pytest.mark.parametrize("rating", [0, 6])
    def test_feedback_rating_bounds(self, rating):
        with pytest.raises(ResponseSchemaError):
            Feedback.from_dict({"_id": "f1", "name": "Ama", "rating": rating})


class TestLoginParsing:

    def test_user_login(self):
        auth = parse_user_login({"token": "t", "role": "supplier", "user": {"username": "kamal"}})
        assert auth.scope == USER_SCOPE
        assert auth.role == "supplier"
        assert auth.username == "kamal"

    def test_user_role_must_be_buyer_or_supplier(self):
        with pytest.raises(ResponseSchemaError):
            parse_user_login({"token": "t", "role": "admin"})

    def test_admin_login_defaults_role(self):
        auth = parse_admin_login({"token": "t", "admin": {"email": "root@rebuy.lk"}})
        assert auth.scope == ADMIN_SCOPE
        assert auth.role == "admin"
        assert auth.is_admin

    def test_missing_token(self):
        with pytest.raises(ResponseSchemaError):
            parse_admin_login({"admin": {}})
