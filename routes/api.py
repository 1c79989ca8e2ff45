"""
API routes (AJAX endpoints).

Handles:
- /health                       - Health check endpoint
- /api/dashboard/<name>         - JSON summary polled by dashboards every
                                  DASHBOARD_REFRESH_SECONDS (finance, feedback,
                                  stock, offers, orders)
"""

from dataclasses import asdict

from flask import Blueprint, current_app, jsonify

from core.exceptions import AuthExpiredError
from core.session import ADMIN_SCOPE
from modules import summaries
from services.finance_service import FeedbackService, FinanceService
from services.offer_service import OfferService
from services.order_service import OrderService
from services.stock_service import StockService
from logging_config import get_logger
from .guards import BACKEND_ERRORS, admin_required, api_client


# Module logger
logger = get_logger(__name__)

api_bp = Blueprint("api", __name__)


def _finance():
    s = summaries.summarize_finance(FinanceService(api_client(ADMIN_SCOPE)).list_entries())
    return {**asdict(s), "balance": s.balance, "savings_rate": round(s.savings_rate, 1)}


def _feedback():
    s = summaries.summarize_feedback(FeedbackService(api_client(ADMIN_SCOPE)).list_feedback())
    data = asdict(s)
    data["distribution"] = {str(k): v for k, v in s.distribution.items()}
    return data


DASHBOARDS = {
    "finance": _finance,
    "feedback": _feedback,
    "stock": lambda: asdict(summaries.summarize_stock(StockService(api_client(ADMIN_SCOPE)).list_stock())),
    "offers": lambda: asdict(summaries.summarize_offers(OfferService(api_client(ADMIN_SCOPE)).list_offers())),
    "orders": lambda: asdict(summaries.summarize_orders(OrderService(api_client(ADMIN_SCOPE)).list_admin_orders())),
}


@api_bp.route("/health", methods=["GET"])
def health():
    """Health check for monitoring."""
    delivery_service = current_app.config.get("DELIVERY_SERVICE")
    return jsonify({
        "status": "healthy",
        "backend": current_app.config["API_BASE_URL"],
        "delivery_service": delivery_service is not None,
    })


@api_bp.route("/api/dashboard/<name>", methods=["GET"])
@admin_required
def dashboard(name: str):
    """
    Fresh summary for a dashboard widget.

    Returns 502 with {"error": ...} when the backend call fails; the page
    keeps showing its previous numbers.
    """
    if name not in DASHBOARDS:
        return jsonify({"error": f"Unknown dashboard '{name}'"}), 404

    try:
        data = DASHBOARDS[name]()
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        logger.warning(f"Dashboard refresh '{name}' failed: {e}")
        return jsonify({"error": e.message}), 502

    return jsonify({"summary": data, "refresh_seconds": current_app.config["DASHBOARD_REFRESH_SECONDS"]})
