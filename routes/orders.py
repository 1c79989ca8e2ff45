"""
Admin order management.

Handles:
- /admin/orders                    - searchable, status-filtered order list
- /admin/orders/<id>/status (POST) - change an order's status
"""

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from core.exceptions import AuthExpiredError, ValidationError
from core.session import ADMIN_SCOPE
from models.order import ORDER_STATUSES
from modules.formatting import slip_url
from modules.order_filter import filter_by_status, search_orders
from modules.summaries import summarize_orders
from services.order_service import OrderService
from logging_config import get_logger
from .guards import BACKEND_ERRORS, admin_required, api_client


logger = get_logger(__name__)

orders_bp = Blueprint("orders", __name__)


def load_filtered_orders(args):
    """Admin orders narrowed by the ``q`` and ``status`` query args."""
    orders = OrderService(api_client(ADMIN_SCOPE)).list_admin_orders()
    orders = search_orders(orders, args.get("q"))
    return filter_by_status(orders, args.get("status"))


@orders_bp.route("/admin/orders", methods=["GET"])
@admin_required
def admin_orders():
    orders = []
    try:
        orders = load_filtered_orders(request.args)
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        logger.error(f"Failed to fetch orders: {e}")
        flash(f"Failed to fetch orders: {e.message}", "error")

    base_url = current_app.config["API_BASE_URL"]
    return render_template(
        "admin/orders.html",
        orders=orders,
        slips={order.id: slip_url(base_url, order.slip_url) for order in orders},
        summary=summarize_orders(orders),
        statuses=ORDER_STATUSES,
        q=request.args.get("q", ""),
        status=request.args.get("status", "all"),
    )


@orders_bp.route("/admin/orders/<order_id>/status", methods=["POST"])
@admin_required
def update_status(order_id: str):
    status = request.form.get("status", "")
    try:
        order = OrderService(api_client(ADMIN_SCOPE)).update_status(order_id, status)
    except ValidationError as e:
        flash(e.field_errors.get("status", e.message), "error")
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        flash(f"Failed to update order: {e.message}", "error")
    else:
        flash(f"Order {order.order_number} marked as {order.status_label}.", "success")

    return redirect(url_for("orders.admin_orders", **request.args))
