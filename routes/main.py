"""
Customer-facing pages: product listing and feedback.

Both are anonymous; a backend outage shows an empty page with a flash
message rather than an error page.
"""

from flask import Blueprint, flash, redirect, render_template, request, url_for

from core.exceptions import ValidationError
from modules.list_filters import filter_products, stock_categories
from modules.summaries import summarize_feedback
from modules.validation import validate_feedback_form
from services.finance_service import FeedbackService
from services.stock_service import StockService
from logging_config import get_logger
from .guards import BACKEND_ERRORS, api_client


logger = get_logger(__name__)

main_bp = Blueprint("main", __name__)


@main_bp.route("/")
def index():
    """Product listing with search, category filter and price sort."""
    term = request.args.get("q", "")
    category = request.args.get("category", "")
    sort = request.args.get("sort", "")

    products, categories = [], []
    try:
        service = StockService(api_client())
        products = service.list_products()
        categories = stock_categories(service.list_stock())
    except BACKEND_ERRORS as e:
        logger.error(f"Failed to load products: {e}")
        flash(f"Failed to load products: {e.message}", "error")

    return render_template(
        "products.html",
        products=filter_products(products, term, category, sort),
        categories=categories,
        q=term,
        category=category,
        sort=sort,
    )


@main_bp.route("/feedback", methods=["GET", "POST"])
def feedback():
    """Read reviews and leave one."""
    service = FeedbackService(api_client())
    errors = {}

    if request.method == "POST":
        try:
            payload = validate_feedback_form(request.form)
            service.submit_feedback(payload)
        except ValidationError as e:
            errors = e.field_errors
        except BACKEND_ERRORS as e:
            flash(f"Could not submit feedback: {e.message}", "error")
        else:
            flash("Thank you for your feedback!", "success")
            return redirect(url_for("main.feedback"))

    items = []
    try:
        items = service.list_feedback()
    except BACKEND_ERRORS as e:
        flash(f"Failed to load feedback: {e.message}", "error")

    return render_template(
        "feedback.html",
        feedback=items,
        summary=summarize_feedback(items),
        errors=errors,
        form=request.form,
    )
