"""
Finance and feedback moderation routes (admin).

Handles:
- /admin/finance                        - ledger, summary, add-entry form
- /admin/feedback                       - reviews with rating summary
- /admin/feedback/<id>/delete (POST)
"""

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from core.exceptions import AuthExpiredError, ValidationError
from core.session import ADMIN_SCOPE
from models.finance import ENTRY_TYPES, FINANCE_CATEGORIES
from modules.list_filters import filter_finance
from modules.summaries import summarize_feedback, summarize_finance
from modules.validation import validate_finance_form
from services.finance_service import FeedbackService, FinanceService
from logging_config import get_logger
from .guards import BACKEND_ERRORS, admin_required, api_client


logger = get_logger(__name__)

finance_bp = Blueprint("finance", __name__)


def load_filtered_finance(args):
    """Entries narrowed by the ``type`` and ``category`` query args."""
    entries = FinanceService(api_client(ADMIN_SCOPE)).list_entries()
    return filter_finance(entries, args.get("type"), args.get("category"))


@finance_bp.route("/admin/finance", methods=["GET", "POST"])
@admin_required
def finance():
    errors = {}

    if request.method == "POST":
        try:
            entry = FinanceService(api_client(ADMIN_SCOPE)).add_entry(validate_finance_form(request.form))
        except ValidationError as e:
            errors = e.field_errors
        except AuthExpiredError:
            raise
        except BACKEND_ERRORS as e:
            flash(f"Failed to add entry: {e.message}", "error")
        else:
            flash(f"{entry.type} of {entry.amount:,.2f} recorded.", "success")
            return redirect(url_for("finance.finance"))

    entries = []
    try:
        entries = load_filtered_finance(request.args)
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        logger.error(f"Failed to fetch finance entries: {e}")
        flash(f"Failed to fetch finance entries: {e.message}", "error")

    return render_template(
        "admin/finance.html",
        entries=entries,
        summary=summarize_finance(entries),
        errors=errors,
        form=request.form,
        types=ENTRY_TYPES,
        categories=FINANCE_CATEGORIES,
        refresh_seconds=current_app.config["DASHBOARD_REFRESH_SECONDS"],
    )


@finance_bp.route("/admin/feedback", methods=["GET"])
@admin_required
def feedback():
    items = []
    try:
        items = FeedbackService(api_client(ADMIN_SCOPE)).list_feedback()
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        flash(f"Failed to fetch feedback: {e.message}", "error")

    return render_template(
        "admin/feedback.html",
        feedback=items,
        summary=summarize_feedback(items),
        refresh_seconds=current_app.config["DASHBOARD_REFRESH_SECONDS"],
    )


@finance_bp.route("/admin/feedback/<feedback_id>/delete", methods=["POST"])
@admin_required
def feedback_delete(feedback_id: str):
    try:
        message = FeedbackService(api_client(ADMIN_SCOPE)).delete_feedback(feedback_id)
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        flash(f"Failed to delete feedback: {e.message}", "error")
    else:
        flash(message, "success")
    return redirect(url_for("finance.feedback"))
