"""
Supplier offer routes.

Admin:
- /admin/offers                         - all offers, search / status / sort
- /admin/offers/<id>/<approve|reject>   - decide a Pending offer (POST)

Supplier:
- /supplier/offers                      - own offers
- /supplier/offers/new, /<id>/edit      - create / edit while Pending
- /supplier/offers/<id>/delete (POST)   - delete while Pending
"""

from flask import Blueprint, flash, redirect, render_template, request, url_for

from core.exceptions import AuthExpiredError, InvalidTransitionError, ValidationError
from core.session import ADMIN_SCOPE, USER_SCOPE
from models.offer import OfferStatus
from modules.formatting import format_price_input
from modules.list_filters import OFFER_SORT_KEYS, filter_offers, sort_offers
from modules.summaries import summarize_offers
from modules.validation import validate_offer_form
from services.offer_service import OfferService
from logging_config import get_logger
from .guards import BACKEND_ERRORS, admin_required, api_client, role_required


logger = get_logger(__name__)

offers_bp = Blueprint("offers", __name__)

STATUS_FILTERS = ["All"] + [status.value for status in OfferStatus]


def load_filtered_offers(args, offers=None):
    """Offers narrowed and sorted by the ``q``, ``status``, ``sort``, ``dir`` args."""
    if offers is None:
        offers = OfferService(api_client(ADMIN_SCOPE)).list_offers()
    offers = filter_offers(offers, args.get("q"), args.get("status"))
    return sort_offers(offers, args.get("sort"), descending=args.get("dir") == "desc")


# =============================================================================
# ADMIN
# =============================================================================

@offers_bp.route("/admin/offers", methods=["GET"])
@admin_required
def admin_offers():
    all_offers, offers = [], []
    try:
        all_offers = OfferService(api_client(ADMIN_SCOPE)).list_offers()
        offers = load_filtered_offers(request.args, all_offers)
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        logger.error(f"Failed to fetch offers: {e}")
        flash(f"Failed to fetch offers: {e.message}", "error")

    return render_template(
        "admin/offers.html",
        offers=offers,
        summary=summarize_offers(all_offers),
        statuses=STATUS_FILTERS,
        sort_keys=OFFER_SORT_KEYS,
        q=request.args.get("q", ""),
        status=request.args.get("status", "All"),
        sort=request.args.get("sort", ""),
        direction=request.args.get("dir", "asc"),
    )


@offers_bp.route("/admin/offers/<offer_id>/<action>", methods=["POST"])
@admin_required
def decide(offer_id: str, action: str):
    """Approve or reject; decided offers expose no actions."""
    service = OfferService(api_client(ADMIN_SCOPE))
    try:
        offer = service.find(service.list_offers(), offer_id)
        updated = service.decide(offer, action)
    except KeyError:
        flash("Offer not found.", "error")
    except InvalidTransitionError as e:
        flash(e.message, "warning")
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        flash(f"Failed to {action} offer: {e.message}", "error")
    else:
        flash(f"Offer '{updated.title}' {updated.status.value.lower()}.", "success")

    return redirect(url_for("offers.admin_offers"))


# =============================================================================
# SUPPLIER
# =============================================================================

@offers_bp.route("/supplier/offers", methods=["GET"])
@role_required("supplier")
def my_offers():
    offers = []
    try:
        offers = OfferService(api_client(USER_SCOPE)).list_my_offers()
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        flash(f"Failed to fetch your offers: {e.message}", "error")

    return render_template(
        "supplier/offers.html",
        offers=load_filtered_offers(request.args, offers),
        summary=summarize_offers(offers),
        statuses=STATUS_FILTERS,
        q=request.args.get("q", ""),
        status=request.args.get("status", "All"),
    )


@offers_bp.route("/supplier/offers/new", methods=["GET", "POST"])
@offers_bp.route("/supplier/offers/<offer_id>/edit", methods=["GET", "POST"])
@role_required("supplier")
def offer_form(offer_id=None):
    service = OfferService(api_client(USER_SCOPE))
    errors = {}
    form = request.form
    existing = None

    try:
        if offer_id:
            existing = service.find(service.list_my_offers(), offer_id)
    except KeyError:
        flash("Offer not found.", "error")
        return redirect(url_for("offers.my_offers"))
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        flash(f"Failed to load offer: {e.message}", "error")
        return redirect(url_for("offers.my_offers"))

    if existing is not None and not existing.can_edit:
        flash(f"Cannot edit an offer that is already {existing.status.value}.", "warning")
        return redirect(url_for("offers.my_offers"))

    if request.method == "POST":
        try:
            payload = validate_offer_form(form)
            if existing is not None:
                service.update_offer(existing, payload)
            else:
                service.create_offer(payload)
        except ValidationError as e:
            errors = e.field_errors
        except InvalidTransitionError as e:
            flash(e.message, "warning")
        except AuthExpiredError:
            raise
        except BACKEND_ERRORS as e:
            flash(f"Failed to save offer: {e.message}", "error")
        else:
            flash("Offer updated successfully" if existing else "Offer submitted successfully", "success")
            return redirect(url_for("offers.my_offers"))
    elif existing is not None:
        form = {
            "title": existing.title,
            "description": existing.description,
            "pricePerUnit": format_price_input(f"{existing.price_per_unit:.2f}"),
            "quantityOffered": existing.quantity_offered,
            "deliveryDate": existing.delivery_date.date().isoformat() if existing.delivery_date else "",
        }

    return render_template("supplier/offer_form.html", offer=existing, form=form, errors=errors)


@offers_bp.route("/supplier/offers/<offer_id>/delete", methods=["POST"])
@role_required("supplier")
def offer_delete(offer_id: str):
    service = OfferService(api_client(USER_SCOPE))
    try:
        message = service.delete_offer(service.find(service.list_my_offers(), offer_id))
    except KeyError:
        flash("Offer not found.", "error")
    except InvalidTransitionError as e:
        flash(e.message, "warning")
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        flash(f"Failed to delete offer: {e.message}", "error")
    else:
        flash(message, "success")
    return redirect(url_for("offers.my_offers"))
