"""
Login / logout for buyers, suppliers and admins.

Handles:
- /login, /logout              - buyer / supplier session ("token")
- /admin/login, /admin/logout  - back office session ("adminToken")
"""

from flask import (
    Blueprint,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from core.exceptions import ApiHTTPError, ApiTransportError, ResponseSchemaError, ValidationError
from core.session import ADMIN_SCOPE, USER_SCOPE, clear_auth_session, store_auth_session
from modules.validation import validate_login_form
from services.auth_service import AuthService
from logging_config import get_logger
from .guards import api_client


# Module logger
logger = get_logger(__name__)

auth_bp = Blueprint("auth", __name__)

# Where each user role lands after login
ROLE_HOME = {
    "supplier": "offers.my_offers",
    "buyer": "main.index",
}


def _safe_next(default: str) -> str:
    """Only follow same-site relative redirects."""
    target = request.args.get("next", "")
    if target.startswith("/") and not target.startswith("//"):
        return target
    return default


def _login(scope: str, template: str):
    errors = {}
    form = request.form

    if request.method == "POST":
        try:
            credentials = validate_login_form(form)
            service = AuthService(api_client())
            if scope == ADMIN_SCOPE:
                auth = service.login_admin(credentials)
            else:
                auth = service.login_user(credentials)
        except ValidationError as e:
            errors = e.field_errors
        except (ApiHTTPError, ResponseSchemaError) as e:
            logger.warning(f"{scope} login failed: {e.message}")
            flash(e.message if isinstance(e, ApiHTTPError) else "Unexpected login response.", "error")
        except ApiTransportError as e:
            flash(e.message, "error")
        else:
            clear_auth_session(session, scope)
            store_auth_session(session, auth)
            session.modified = True
            flash("Login successful!", "success")

            if scope == ADMIN_SCOPE:
                return redirect(_safe_next(url_for("orders.admin_orders")))
            return redirect(_safe_next(url_for(ROLE_HOME.get(auth.role, "main.index"))))

    return render_template(template, errors=errors, form=form)


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    return _login(USER_SCOPE, "login.html")


@auth_bp.route("/admin/login", methods=["GET", "POST"])
def admin_login():
    return _login(ADMIN_SCOPE, "admin/login.html")


@auth_bp.route("/logout", methods=["POST"])
def logout():
    clear_auth_session(session, USER_SCOPE)
    flash("You have been logged out.", "info")
    return redirect(url_for("main.index"))


@auth_bp.route("/admin/logout", methods=["POST"])
def admin_logout():
    """Forget the admin session and its delivery workflow."""
    delivery_service = current_app.config.get("DELIVERY_SERVICE")
    if delivery_service:
        delivery_service.discard_workflow(session.pop("delivery_workflow", None))
    clear_auth_session(session, ADMIN_SCOPE)
    flash("You have been logged out.", "info")
    return redirect(url_for("auth.admin_login"))
