"""
Inventory routes (admin).

Handles:
- /admin/stock                     - stock list with search / category / status filters
- /admin/stock/new, /<id>/edit     - create / update forms
- /admin/stock/<id>/delete (POST)
- /admin/reorders                  - reorder requests list + create form
- /admin/reorders/<id>/edit, /<id>/delete (POST)
"""

from flask import Blueprint, flash, redirect, render_template, request, url_for

from core.exceptions import AuthExpiredError, ValidationError
from core.session import ADMIN_SCOPE
from models.stock import REORDER_CATEGORIES, REORDER_PRIORITIES, STOCK_CATEGORIES, STOCK_STATUSES
from modules.list_filters import filter_stock
from modules.summaries import summarize_stock
from modules.validation import validate_reorder_form, validate_stock_form
from services.stock_service import ReorderService, StockService
from logging_config import get_logger
from .guards import BACKEND_ERRORS, admin_required, api_client


logger = get_logger(__name__)

stock_bp = Blueprint("stock", __name__)


def load_filtered_stock(args):
    """Stock narrowed by the ``q``, ``category`` and ``status`` query args."""
    items = StockService(api_client(ADMIN_SCOPE)).list_stock()
    return filter_stock(items, args.get("q"), args.get("category"), args.get("status"))


@stock_bp.route("/admin/stock", methods=["GET"])
@admin_required
def stock_list():
    items = []
    try:
        items = load_filtered_stock(request.args)
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        logger.error(f"Failed to fetch stock: {e}")
        flash(f"Failed to fetch stock: {e.message}", "error")

    return render_template(
        "admin/stock.html",
        items=items,
        summary=summarize_stock(items),
        categories=STOCK_CATEGORIES,
        statuses=STOCK_STATUSES,
        q=request.args.get("q", ""),
        category=request.args.get("category", "All"),
        status=request.args.get("status", "All"),
    )


@stock_bp.route("/admin/stock/new", methods=["GET", "POST"])
@stock_bp.route("/admin/stock/<stock_id>/edit", methods=["GET", "POST"])
@admin_required
def stock_form(stock_id=None):
    """Create (no id) or update a stock item."""
    service = StockService(api_client(ADMIN_SCOPE))
    errors = {}
    form = request.form

    if request.method == "POST":
        try:
            payload = validate_stock_form(form)
            if stock_id:
                message = service.update_stock(stock_id, payload)
            else:
                message = service.create_stock(payload)
        except ValidationError as e:
            errors = e.field_errors
        except AuthExpiredError:
            raise
        except BACKEND_ERRORS as e:
            flash(f"Failed to save stock: {e.message}", "error")
        else:
            flash(message, "success")
            return redirect(url_for("stock.stock_list"))
    elif stock_id:
        try:
            item = service.get_stock(stock_id)
        except AuthExpiredError:
            raise
        except BACKEND_ERRORS as e:
            flash(f"Failed to load stock item: {e.message}", "error")
            return redirect(url_for("stock.stock_list"))
        form = {
            "name": item.name,
            "category": item.category,
            "quantity": item.quantity,
            "reorderLevel": item.reorder_level,
            "supplier": item.supplier,
            "price": item.unit_price,
            "description": item.description,
        }

    return render_template(
        "admin/stock_form.html",
        stock_id=stock_id,
        form=form,
        errors=errors,
        categories=STOCK_CATEGORIES,
    )


@stock_bp.route("/admin/stock/<stock_id>/delete", methods=["POST"])
@admin_required
def stock_delete(stock_id: str):
    try:
        message = StockService(api_client(ADMIN_SCOPE)).delete_stock(stock_id)
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        flash(f"Failed to delete stock: {e.message}", "error")
    else:
        flash(message, "success")
    return redirect(url_for("stock.stock_list"))


# =============================================================================
# REORDER REQUESTS
# =============================================================================

@stock_bp.route("/admin/reorders", methods=["GET", "POST"])
@admin_required
def reorders():
    service = ReorderService(api_client(ADMIN_SCOPE))
    errors = {}

    if request.method == "POST":
        try:
            created = service.create_request(validate_reorder_form(request.form))
        except ValidationError as e:
            errors = e.field_errors
        except AuthExpiredError:
            raise
        except BACKEND_ERRORS as e:
            flash(f"Failed to create reorder request: {e.message}", "error")
        else:
            flash(f"Reorder request created: {created.summary}", "success")
            return redirect(url_for("stock.reorders"))

    requests_ = []
    try:
        requests_ = service.list_requests()
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        flash(f"Failed to fetch reorder requests: {e.message}", "error")

    return render_template(
        "admin/reorders.html",
        reorders=requests_,
        errors=errors,
        form=request.form,
        categories=REORDER_CATEGORIES,
        priorities=REORDER_PRIORITIES,
    )


@stock_bp.route("/admin/reorders/<request_id>/edit", methods=["POST"])
@admin_required
def reorder_update(request_id: str):
    try:
        updated = ReorderService(api_client(ADMIN_SCOPE)).update_request(
            request_id, validate_reorder_form(request.form)
        )
    except ValidationError as e:
        for message in e.field_errors.values():
            flash(message, "error")
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        flash(f"Failed to update reorder request: {e.message}", "error")
    else:
        flash(f"Reorder request updated: {updated.summary}", "success")
    return redirect(url_for("stock.reorders"))


@stock_bp.route("/admin/reorders/<request_id>/delete", methods=["POST"])
@admin_required
def reorder_delete(request_id: str):
    try:
        message = ReorderService(api_client(ADMIN_SCOPE)).delete_request(request_id)
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        flash(f"Failed to delete reorder request: {e.message}", "error")
    else:
        flash(message, "success")
    return redirect(url_for("stock.reorders"))
