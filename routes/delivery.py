"""
Delivery assignment routes.

Handles:
- /delivery               - eligible orders with carrier actions
- /delivery/select (POST) - open the confirmation prompt for a carrier
- /delivery/cancel (POST) - close the prompt
- /delivery/confirm (POST)- start the assignment thread
- /delivery/status        - JSON poll: per-order state + notifications

The admin's DeliveryWorkflow is looked up by the id kept in the session
under "delivery_workflow".
"""

from flask import (
    Blueprint,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from core.exceptions import AuthExpiredError, InvalidTransitionError
from core.session import ADMIN_SCOPE, SessionTokenProvider
from models.order import CARRIERS
from modules.order_filter import search_orders
from logging_config import get_logger
from .guards import BACKEND_ERRORS, admin_required, api_client


# Module logger
logger = get_logger(__name__)

delivery_bp = Blueprint("delivery", __name__)

WORKFLOW_KEY = "delivery_workflow"


def _workflow():
    delivery_service = current_app.config["DELIVERY_SERVICE"]
    workflow = delivery_service.get_or_create_workflow(session.get(WORKFLOW_KEY))
    if session.get(WORKFLOW_KEY) != workflow.workflow_id:
        session[WORKFLOW_KEY] = workflow.workflow_id
        session.modified = True
    return delivery_service, workflow


def _flash_notifications(workflow) -> None:
    for note in workflow.drain_notifications():
        flash(note.message, note.category)


@delivery_bp.route("/delivery", methods=["GET"])
@admin_required
def delivery():
    """
    Re-fetch orders and render the assignment table.

    A failed re-fetch keeps the previously cached rows.
    """
    delivery_service, workflow = _workflow()

    try:
        delivery_service.refresh(workflow, api_client(ADMIN_SCOPE))
    except AuthExpiredError:
        raise
    except BACKEND_ERRORS as e:
        logger.error(f"Failed to fetch orders: {e}")
        flash(f"Failed to fetch orders: {e.message}", "error")

    _flash_notifications(workflow)

    term = request.args.get("q", "")
    rows = workflow.rows()
    visible = {order.id for order in search_orders([row.order for row in rows], term)}

    return render_template(
        "admin/delivery.html",
        rows=[row for row in rows if row.order.id in visible],
        prompt=workflow.prompt,
        carriers=CARRIERS,
        q=term,
    )


@delivery_bp.route("/delivery/select", methods=["POST"])
@admin_required
def select_carrier():
    _, workflow = _workflow()
    order_id = request.form.get("order_id", "")
    carrier = request.form.get("carrier", "")

    try:
        workflow.select_carrier(order_id, carrier)
    except KeyError:
        flash("That order is no longer awaiting delivery.", "warning")
    except InvalidTransitionError as e:
        flash(e.message, "warning")

    return redirect(url_for("delivery.delivery"))


@delivery_bp.route("/delivery/cancel", methods=["POST"])
@admin_required
def cancel():
    _, workflow = _workflow()
    workflow.cancel_prompt()
    return redirect(url_for("delivery.delivery"))


@delivery_bp.route("/delivery/confirm", methods=["POST"])
@admin_required
def confirm():
    """
    Hand the prompted order to its carrier in a background thread.

    The admin token is captured here: the assignment thread has no request
    context.
    """
    delivery_service, workflow = _workflow()
    ticket = delivery_service.submit_assignment(workflow, SessionTokenProvider(ADMIN_SCOPE).capture())

    if ticket is None:
        flash("Nothing to assign: the order is already assigned or in progress.", "info")
    else:
        flash(f"Assigning order {ticket.order_number} to {ticket.carrier}...", "info")

    return redirect(url_for("delivery.delivery"))


@delivery_bp.route("/delivery/status", methods=["GET"])
@admin_required
def status():
    """
    JSON polling endpoint for the delivery page.

    Returns:
        {"orders": {order_id: {"state", "deliveryMethod", "status"}},
         "assigning": bool, "notifications": [{"category", "message"}]}
    """
    _, workflow = _workflow()
    rows = workflow.rows()
    notes = workflow.drain_notifications()

    return jsonify({
        "orders": {
            row.order.id: {
                "state": row.state.value,
                "deliveryMethod": row.order.delivery_method,
                "status": row.order.status,
            }
            for row in rows
        },
        "assigning": bool(workflow.assigning_ids),
        "notifications": [{"category": n.category, "message": n.message} for n in notes],
    })
