"""
Route guards and per-request API clients.

Guards redirect instead of raising: an admin page without an admin session
goes to /admin/login, a buyer/supplier page without the right role goes to
/login. Views never read session keys themselves; they use current_auth().
"""

from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import current_app, flash, g, redirect, request, session, url_for

from core.api_client import MarketplaceAPIClient
from core.exceptions import ApiHTTPError, ApiTransportError, ResponseSchemaError
from core.session import ADMIN_SCOPE, USER_SCOPE, AuthSession, SessionTokenProvider, load_auth_session
from logging_config import get_logger


logger = get_logger(__name__)

ANONYMOUS = "anonymous"

# Failures a view reports with a flash message. AuthExpiredError is an
# ApiHTTPError too; authenticated views re-raise it first so the app handler
# can send the user back to login.
BACKEND_ERRORS = (ApiHTTPError, ApiTransportError, ResponseSchemaError)


def current_auth(scope: str) -> Optional[AuthSession]:
    return load_auth_session(session, scope)


def login_endpoint(scope: str) -> str:
    return "auth.admin_login" if scope == ADMIN_SCOPE else "auth.login"


def admin_required(view):
    """Allow the view only with an admin session."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if current_auth(ADMIN_SCOPE) is None:
            flash("Please log in as an administrator.", "warning")
            return redirect(url_for("auth.admin_login", next=request.path))
        return view(*args, **kwargs)
    return wrapped


def role_required(*roles: str):
    """Allow the view only for a logged-in user holding one of ``roles``."""
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            auth = current_auth(USER_SCOPE)
            if auth is None:
                flash("Please log in to continue.", "warning")
                return redirect(url_for("auth.login", next=request.path))
            if auth.role not in roles:
                logger.warning(f"{auth.username} ({auth.role}) denied access to {request.path}")
                flash("You do not have access to that page.", "error")
                return redirect(url_for("auth.login"))
            return view(*args, **kwargs)
        return wrapped
    return decorator


def api_client(scope: Optional[str] = None) -> MarketplaceAPIClient:
    """
    API client for the current request.

    Args:
        scope: "admin" or "user" to send that scope's token; None for
            anonymous endpoints

    One client per scope is kept on flask.g and closed at teardown.
    """
    key = scope or ANONYMOUS
    clients = g.setdefault("api_clients", {})
    if key not in clients:
        factory = current_app.config["API_CLIENT_FACTORY"]
        provider = SessionTokenProvider(scope) if scope else None
        clients[key] = factory(provider, scope or USER_SCOPE)
    return clients[key]


def close_api_clients(exc=None) -> None:
    """Teardown hook: release this request's clients."""
    clients = g.pop("api_clients", {})
    for client in clients.values():
        client.close()
