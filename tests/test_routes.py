"""
Integration tests for the Flask routes against a mocked backend client.
"""

import pytest

from core.exceptions import ApiHTTPError, ApiTransportError, AuthExpiredError
from core.session import ADMIN_SCOPE, USER_SCOPE

ORDER_ID = "665f1c2ab4e8d90012a1b2c3"


@pytest.fixture
def offer_json():
    def _make(status="Pending", **overrides):
        data = {
            "_id": "off-1", "title": "Used iPads", "description": "Batch of 20",
            "pricePerUnit": 40000, "quantityOffered": 20, "status": status,
            "deliveryDate": "2030-01-01T00:00:00.000Z",
        }
        data.update(overrides)
        return data
    return _make


@pytest.fixture
def backend(api, order_payload, offer_json):
    """Route GETs by path to canned payloads."""
    payloads = {
        "/api/orders/admin": [order_payload(ORDER_ID), order_payload("665f1c2ab4e8d90012ffffff",
                                                                     paymentMethod="cash_on_delivery")],
        "/api/stock": [{"_id": "s1", "name": "Pixel", "category": "Smartphone", "quantity": 1,
                        "reorderLevel": 3, "supplier": "ACME", "price": 1000}],
        "/api/products": [{"_id": "p1", "name": "Pixel 7", "category": "Smartphone",
                           "description": "Like new", "price": 120000}],
        "/api/offer": {"offers": [offer_json()]},
        "/api/offer/my-offers": [offer_json()],
        "/api/finance": [{"_id": "f1", "type": "Income", "amount": 5000, "description": "Sales"}],
        "/api/feedback": [{"_id": "fb1", "name": "Ama", "comment": "Fast delivery", "rating": 5}],
        "/api/reorders": [],
    }
    api.get.side_effect = lambda path, params=None, auth=True: payloads[path]
    return payloads


class TestGuards:
    """Redirects for missing or wrong sessions."""

    @pytest.mark.parametrize("path", ["/admin/orders", "/delivery", "/admin/finance", "/admin/reports/pack.pdf"])
    def test_admin_pages_require_admin(self, client, path):
        response = client.get(path)

        assert response.status_code == 302
        assert "/admin/login" in response.headers["Location"]

    def test_supplier_page_requires_login(self, client):
        response = client.get("/supplier/offers")
        assert response.status_code == 302
        assert response.headers["Location"].startswith("/login")

    def test_buyer_cannot_open_supplier_pages(self, client):
        with client.session_transaction() as sess:
            sess["token"] = "t"
            sess["role"] = "buyer"

        response = client.get("/supplier/offers")
        assert response.status_code == 302

    def test_expired_admin_token_clears_session(self, admin_client, api):
        api.get.side_effect = AuthExpiredError(scope=ADMIN_SCOPE)

        response = admin_client.get("/admin/orders")

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/admin/login")
        with admin_client.session_transaction() as sess:
            assert "adminToken" not in sess

    def test_expired_user_token_keeps_admin_session(self, admin_client, api):
        with admin_client.session_transaction() as sess:
            sess["token"] = "user-token"
            sess["role"] = "supplier"
        api.get.side_effect = AuthExpiredError(scope=USER_SCOPE)

        response = admin_client.get("/supplier/offers")

        assert response.headers["Location"].endswith("/login")
        with admin_client.session_transaction() as sess:
            assert "token" not in sess
            assert sess["adminToken"] == "admin-token"


class TestAuth:

    def test_admin_login(self, client, api):
        api.post.return_value = {"token": "jwt", "admin": {"email": "root@rebuy.lk", "role": "super_admin"}}

        response = client.post("/admin/login", data={"email": "Root@ReBuy.lk", "password": "pw"})

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/admin/orders")
        api.post.assert_called_once_with(
            "/api/admin/auth/login", json={"email": "root@rebuy.lk", "password": "pw"}, auth=False
        )
        with client.session_transaction() as sess:
            assert sess["adminToken"] == "jwt"
            assert sess["adminRole"] == "super_admin"

    def test_supplier_lands_on_offers(self, client, api):
        api.post.return_value = {"token": "jwt", "role": "supplier", "user": {"username": "kamal"}}

        response = client.post("/login", data={"email": "k@s.lk", "password": "pw"})

        assert response.headers["Location"].endswith("/supplier/offers")

    def test_invalid_form_makes_no_request(self, client, api):
        response = client.post("/login", data={"email": "bad"})

        assert response.status_code == 200
        assert b"Please enter a valid email address" in response.data
        api.post.assert_not_called()

    def test_bad_credentials_flashed(self, client, api):
        api.post.side_effect = ApiHTTPError(400, "Invalid credentials")

        response = client.post("/login", data={"email": "k@s.lk", "password": "x"}, follow_redirects=True)

        assert b"Invalid credentials" in response.data

    def test_admin_logout(self, admin_client):
        response = admin_client.post("/admin/logout")

        assert response.headers["Location"].endswith("/admin/login")
        with admin_client.session_transaction() as sess:
            assert "adminToken" not in sess


class TestPublicPages:

    def test_products(self, client, backend):
        response = client.get("/?q=pixel")

        assert response.status_code == 200
        assert b"Pixel 7" in response.data

    def test_backend_down_still_renders(self, client, api):
        api.get.side_effect = ApiTransportError("GET", "/api/products", "connection refused")

        response = client.get("/")

        assert response.status_code == 200
        assert b"Failed to load products" in response.data

    def test_submit_feedback(self, client, api, backend):
        api.post.return_value = {"_id": "fb2", "name": "Ama", "comment": "Nice", "rating": 4}

        response = client.post("/feedback", data={"name": "Ama", "rating": "4", "comment": "Nice"})

        assert response.status_code == 302
        api.post.assert_called_once_with(
            "/api/feedback", json={"name": "Ama", "rating": 4, "comment": "Nice"}, auth=False
        )


class TestAdminOrders:

    def test_list(self, admin_client, backend):
        response = admin_client.get("/admin/orders?status=confirmed")

        assert response.status_code == 200
        assert b"ORD-b2c3" in response.data

    def test_backend_error_flashed(self, admin_client, api):
        api.get.side_effect = ApiHTTPError(500, "Database unavailable")

        response = admin_client.get("/admin/orders")

        assert response.status_code == 200
        assert b"Database unavailable" in response.data

    def test_status_change(self, admin_client, api, order_payload):
        api.put.return_value = {"order": order_payload(ORDER_ID, status="delivered")}

        response = admin_client.post(f"/admin/orders/{ORDER_ID}/status", data={"status": "delivered"})

        assert response.status_code == 302
        api.put.assert_called_once_with(f"/api/orders/{ORDER_ID}/status", json={"status": "delivered"})

    def test_unknown_status_not_sent(self, admin_client, api):
        admin_client.post(f"/admin/orders/{ORDER_ID}/status", data={"status": "lost"})
        api.put.assert_not_called()


class TestDeliveryFlow:
    """Select, confirm, background assignment, status poll."""

    def test_assign_carrier(self, app, admin_client, api, backend, order_payload):
        api.put.return_value = {"order": order_payload(ORDER_ID, status="shipped", deliveryMethod="Uber")}

        page = admin_client.get("/delivery")
        assert page.status_code == 200
        assert b"ORD-b2c3" in page.data
        assert b"ORD-ffff" not in page.data

        admin_client.post("/delivery/select", data={"order_id": ORDER_ID, "carrier": "Uber"})
        assert b"Confirm" in admin_client.get("/delivery").data

        response = admin_client.post("/delivery/confirm")
        assert response.status_code == 302
        app.config["DELIVERY_SERVICE"].shutdown(timeout_per_thread=2.0)

        status = admin_client.get("/delivery/status").get_json()

        assert status["orders"][ORDER_ID]["state"] == "Assigned"
        assert status["orders"][ORDER_ID]["deliveryMethod"] == "Uber"
        assert status["assigning"] is False
        assert status["notifications"][0]["message"] == "Order ORD-b2c3 successfully assigned to Uber"
        api.put.assert_called_once_with(
            f"/api/orders/{ORDER_ID}/status", json={"status": "shipped", "deliveryMethod": "Uber"}
        )

        # Second attempt for the same order is refused without a request
        admin_client.post("/delivery/select", data={"order_id": ORDER_ID, "carrier": "PickMe"})
        admin_client.post("/delivery/confirm")
        app.config["DELIVERY_SERVICE"].shutdown(timeout_per_thread=2.0)
        assert api.put.call_count == 1

    def test_failed_assignment_reported(self, app, admin_client, api, backend):
        api.put.side_effect = ApiHTTPError(500, "Carrier service down")

        admin_client.get("/delivery")
        admin_client.post("/delivery/select", data={"order_id": ORDER_ID, "carrier": "PickMe"})
        admin_client.post("/delivery/confirm")
        app.config["DELIVERY_SERVICE"].shutdown(timeout_per_thread=2.0)

        status = admin_client.get("/delivery/status").get_json()

        assert status["orders"][ORDER_ID]["state"] == "Ready"
        assert status["notifications"][0] == {
            "category": "error", "message": "Failed to assign delivery: Carrier service down",
        }

    def test_cancel_prompt(self, admin_client, api, backend):
        admin_client.get("/delivery")
        admin_client.post("/delivery/select", data={"order_id": ORDER_ID, "carrier": "Uber"})
        admin_client.post("/delivery/cancel")
        admin_client.post("/delivery/confirm")

        api.put.assert_not_called()


class TestOffers:

    def test_approve(self, admin_client, api, backend, offer_json):
        api.patch.return_value = {"offer": offer_json(status="Approved")}

        response = admin_client.post("/admin/offers/off-1/approve", follow_redirects=True)

        api.patch.assert_called_once_with("/api/offer/off-1/approve")
        assert b"approved" in response.data

    def test_decided_offer_not_sent(self, admin_client, api, backend, offer_json):
        backend["/api/offer"] = {"offers": [offer_json(status="Rejected")]}

        response = admin_client.post("/admin/offers/off-1/approve", follow_redirects=True)

        api.patch.assert_not_called()
        assert b"Cannot approve offer" in response.data

    def test_admin_list_hides_actions_for_decided(self, admin_client, backend, offer_json):
        backend["/api/offer"] = {"offers": [offer_json(status="Approved")]}

        response = admin_client.get("/admin/offers")

        assert response.status_code == 200
        assert b"/admin/offers/off-1/approve" not in response.data

    def test_supplier_creates_offer(self, supplier_client, api, backend, offer_json):
        api.post.return_value = {"message": "created", "offer": offer_json()}

        response = supplier_client.post("/supplier/offers/new", data={
            "title": "Used iPads", "description": "Batch of 20", "pricePerUnit": "40,000",
            "quantityOffered": "20", "deliveryDate": "2099-01-01",
        })

        assert response.status_code == 302
        assert api.post.call_args.kwargs["json"]["pricePerUnit"] == 40000.0


class TestReportsAndDashboards:

    def test_stock_pdf(self, admin_client, backend):
        response = admin_client.get("/admin/reports/stock.pdf")

        assert response.status_code == 200
        assert response.mimetype == "application/pdf"
        assert response.data.startswith(b"%PDF")

    def test_pack_pdf(self, admin_client, backend):
        response = admin_client.get("/admin/reports/pack.pdf")

        assert response.status_code == 200
        assert response.data.startswith(b"%PDF")

    def test_finance_csv(self, admin_client, backend):
        response = admin_client.get("/admin/reports/finance.csv")

        assert response.mimetype == "text/csv"
        assert b"Sales" in response.data

    def test_finance_dashboard(self, admin_client, backend):
        data = admin_client.get("/api/dashboard/finance").get_json()

        assert data["summary"]["total_income"] == 5000
        assert data["summary"]["balance"] == 5000

    def test_unknown_dashboard(self, admin_client):
        assert admin_client.get("/api/dashboard/weather").status_code == 404

    def test_dashboard_backend_error(self, admin_client, api):
        api.get.side_effect = ApiHTTPError(503, "Maintenance")

        response = admin_client.get("/api/dashboard/feedback")

        assert response.status_code == 502
        assert response.get_json() == {"error": "Maintenance"}

    def test_health(self, client):
        data = client.get("/health").get_json()
        assert data["status"] == "healthy"
        assert data["backend"] == "http://backend.test"


class TestStock:

    def test_list_shows_derived_status(self, admin_client, backend):
        response = admin_client.get("/admin/stock", query_string={"status": "Low Stock"})

        assert response.status_code == 200
        assert b"Pixel" in response.data
        assert b"Low Stock" in response.data

    def test_create(self, admin_client, api, backend):
        api.post.return_value = {"message": "Stock added successfully!"}

        response = admin_client.post("/admin/stock/new", data={
            "name": "Galaxy Tab", "category": "Tablet", "quantity": "4",
            "reorderLevel": "2", "supplier": "ACME", "price": "55,000",
        }, follow_redirects=True)

        assert b"Stock added successfully!" in response.data
        path = api.post.call_args.args[0]
        body = api.post.call_args.kwargs["json"]
        assert path == "/api/admin/auth/stocks"
        assert body["quantity"] == 4
        assert body["price"] == 55000.0

    def test_invalid_form_rerendered(self, admin_client, api):
        response = admin_client.post("/admin/stock/new", data={
            "name": "Galaxy Tab 7", "category": "Tablet", "quantity": "-1",
            "reorderLevel": "2", "supplier": "ACME",
        })

        assert response.status_code == 200
        assert b"Name can only contain letters and spaces" in response.data
        api.post.assert_not_called()

    def test_delete(self, admin_client, api, backend):
        api.delete.return_value = {"message": "Stock deleted successfully!"}

        response = admin_client.post("/admin/stock/s1/delete")

        assert response.headers["Location"].endswith("/admin/stock")
        api.delete.assert_called_once_with("/api/admin/auth/stocks/s1")


class TestReorders:

    FORM = {
        "title": "More phones", "quantity": "10", "category": "Mobile Phones",
        "description": "Restock for the holiday season",
    }

    def test_create_defaults_priority(self, admin_client, api, backend):
        api.post.return_value = {"request": {"_id": "r1", "title": "More phones", "quantity": 10,
                                             "category": "Mobile Phones", "priority": "Normal",
                                             "description": "Restock for the holiday season"}}

        response = admin_client.post("/admin/reorders", data=self.FORM, follow_redirects=True)

        assert b"More phones (10 units) - Priority: Normal" in response.data
        assert api.post.call_args.kwargs["json"]["priority"] == "Normal"

    def test_short_description_rejected(self, admin_client, api, backend):
        response = admin_client.post("/admin/reorders", data={**self.FORM, "description": "soon"})

        assert response.status_code == 200
        assert b"Description must be between 10 and 500 characters" in response.data
        api.post.assert_not_called()

    def test_delete(self, admin_client, api, backend):
        api.delete.return_value = {"message": "Reorder request deleted successfully"}

        admin_client.post("/admin/reorders/r1/delete")

        api.delete.assert_called_once_with("/api/reorders/r1")


class TestFinanceAndFeedback:

    def test_add_entry(self, admin_client, api, backend):
        api.post.return_value = {"message": "ok", "entry": {"_id": "f2", "type": "Expense", "amount": 1200,
                                                             "description": "Courier", "category": "Transport"}}

        response = admin_client.post("/admin/finance", data={
            "type": "Expense", "amount": "1,200", "description": "Courier", "category": "Transport",
        }, follow_redirects=True)

        assert b"Expense of 1,200.00 recorded." in response.data
        api.post.assert_called_once_with("/api/finance", json={
            "type": "Expense", "amount": 1200.0, "description": "Courier", "category": "Transport",
        })

    @pytest.mark.parametrize("amount, message", [
        ("-5", b"Amount cannot be negative"),
        ("nan", b"Amount must be a number"),
        ("1e400", b"Amount must be a number"),
    ])
    def test_bad_amount_rerendered(self, admin_client, api, backend, amount, message):
        response = admin_client.post("/admin/finance", data={
            "type": "Income", "amount": amount, "description": "Nothing",
        })

        assert response.status_code == 200
        assert message in response.data
        api.post.assert_not_called()

    def test_feedback_page(self, admin_client, backend):
        response = admin_client.get("/admin/feedback")

        assert response.status_code == 200
        assert b"Fast delivery" in response.data

    def test_delete_feedback(self, admin_client, api, backend):
        api.delete.return_value = {"message": "Feedback deleted"}

        response = admin_client.post("/admin/feedback/fb1/delete", follow_redirects=True)

        api.delete.assert_called_once_with("/api/feedback/fb1")
        assert b"Feedback deleted" in response.data


class TestSupplierOfferChanges:

    def test_edit_pending_offer(self, supplier_client, api, backend, offer_json):
        api.put.return_value = {"message": "updated", "offer": offer_json(quantityOffered=25)}

        response = supplier_client.post("/supplier/offers/off-1/edit", data={
            "title": "Used iPads", "description": "Batch of 25", "pricePerUnit": "40,000",
            "quantityOffered": "25", "deliveryDate": "2099-01-01",
        })

        assert response.status_code == 302
        assert api.put.call_args.args[0] == "/api/offer/off-1"

    def test_decided_offer_cannot_be_edited(self, supplier_client, api, backend, offer_json):
        backend["/api/offer/my-offers"] = [offer_json(status="Approved")]

        response = supplier_client.get("/supplier/offers/off-1/edit", follow_redirects=True)

        assert b"Cannot edit an offer that is already Approved" in response.data
        api.put.assert_not_called()

    def test_decided_offer_cannot_be_deleted(self, supplier_client, api, backend, offer_json):
        backend["/api/offer/my-offers"] = [offer_json(status="Rejected")]

        supplier_client.post("/supplier/offers/off-1/delete")

        api.delete.assert_not_called()

    def test_delete_pending_offer(self, supplier_client, api, backend):
        api.delete.return_value = {"message": "Offer deleted"}

        supplier_client.post("/supplier/offers/off-1/delete")

        api.delete.assert_called_once_with("/api/offer/off-1")

    def test_unknown_offer(self, supplier_client, api, backend):
        response = supplier_client.post("/supplier/offers/missing/delete", follow_redirects=True)

        assert b"Offer not found." in response.data
