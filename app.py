"""
ReBuy Web - Flask Application Entry Point.

This is a slim app factory that:
1. Loads configuration (.env via python-dotenv, then a Config class)
2. Builds the API client factory for the marketplace backend
3. Creates the delivery service (thread-per-assignment)
4. Registers route blueprints
5. Sets up error handlers and context processors

ARCHITECTURE:
    Main Thread
    ├── Flask request handling (one API client per request and scope)
    └── Cleanup on shutdown (join assignment threads)

    Assignment Threads (one per confirmed carrier hand-off)
    └── Each with OWN API client and a token captured at confirm time

The backend owns all canonical state; the only in-process state is the
per-admin delivery workflows held by the DeliveryService.
"""

from __future__ import annotations

import atexit
import logging
import os
from typing import Optional, Union

from dotenv import load_dotenv
from flask import Flask, flash, redirect, session, url_for
from werkzeug.exceptions import InternalServerError, NotFound

from logging_config import setup_logging, get_logger
from core.api_client import make_client_factory
from core.exceptions import ApiTransportError, AuthExpiredError
from core.session import ADMIN_SCOPE, USER_SCOPE, clear_auth_session, load_auth_session
from modules.formatting import format_date, format_price, slip_url
from services.delivery_service import DeliveryService
from routes import register_blueprints
from routes.guards import close_api_clients, login_endpoint


# Module logger (configured after setup_logging)
logger = get_logger(__name__)


def create_app(config_object: Optional[Union[str, type]] = None) -> Flask:
    """
    Application factory - creates and configures Flask app.

    Args:
        config_object: Import path or class of the config to load
            (default: "config.Config"); tests pass config.TestingConfig

    Returns:
        Configured Flask application
    """
    # Use override=True so .env file always takes precedence over shell environment
    load_dotenv(override=True)

    # Create Flask app
    app = Flask(__name__)
    app.config.from_object(config_object or "config.Config")

    # Configure logging
    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = app.config.get("ENVIRONMENT") == "production" and not app.config.get("TESTING")

    root_logger = setup_logging(log_level=log_level, enable_file_logging=enable_file_logging)

    # Set Flask's logger to use our configured logger
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting ReBuy Web in {app.config.get('ENVIRONMENT')} mode against {app.config['API_BASE_URL']}")

    # =========================================================================
    # SERVICES INITIALIZATION
    # =========================================================================

    # Tests may pre-seed API_CLIENT_FACTORY with a mock factory
    if "API_CLIENT_FACTORY" not in app.config:
        app.config["API_CLIENT_FACTORY"] = make_client_factory(
            app.config["API_BASE_URL"],
            timeout_seconds=app.config["API_TIMEOUT_SECONDS"],
        )

    def assignment_client(token_provider):
        return app.config["API_CLIENT_FACTORY"](token_provider, ADMIN_SCOPE)

    delivery_service = DeliveryService(
        assignment_client,
        idle_ttl_seconds=app.config["DELIVERY_WORKFLOW_TTL_SECONDS"],
    )
    app.config["DELIVERY_SERVICE"] = delivery_service
    logger.info("Delivery service initialized")

    # =========================================================================
    # CLEANUP REGISTRATION
    # =========================================================================

    def cleanup():
        """Cleanup on application shutdown."""
        logger.info("Shutting down...")
        delivery_service.shutdown(timeout_per_thread=app.config["ASSIGNMENT_THREAD_JOIN_SECONDS"])
        logger.info("Shutdown complete")

    atexit.register(cleanup)
    app.teardown_appcontext(close_api_clients)

    # =========================================================================
    # REGISTER BLUEPRINTS
    # =========================================================================

    register_blueprints(app)

    # =========================================================================
    # CONTEXT PROCESSORS
    # =========================================================================

    @app.context_processor
    def inject_auth():
        """Current sessions for navigation and role-dependent links."""
        return {
            "admin_auth": load_auth_session(session, ADMIN_SCOPE),
            "user_auth": load_auth_session(session, USER_SCOPE),
        }

    @app.context_processor
    def inject_helpers():
        return {
            "format_price": format_price,
            "format_date": format_date,
            "slip_url": lambda path: slip_url(app.config["API_BASE_URL"], path),
            "refresh_seconds": app.config["DASHBOARD_REFRESH_SECONDS"],
            "company_name": app.config["COMPANY_NAME"],
        }

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(AuthExpiredError)
    def handle_auth_expired(e):
        """401 from the backend (or no token): forget that scope and log in again."""
        logger.warning(f"Auth expired for scope '{e.scope}' on {e.method} {e.path}")
        if e.scope == ADMIN_SCOPE:
            delivery_service.discard_workflow(session.pop("delivery_workflow", None))
        clear_auth_session(session, e.scope)
        flash("Session expired. Please log in again.", "warning")
        return redirect(url_for(login_endpoint(e.scope)))

    @app.errorhandler(ApiTransportError)
    def handle_backend_unreachable(e):
        logger.error(f"Backend unreachable: {e}")
        flash("The marketplace service is unavailable. Please try again shortly.", "error")
        return redirect(url_for("main.index"))

    @app.errorhandler(NotFound)
    def handle_not_found(e):
        flash("Page not found.", "warning")
        return redirect(url_for("main.index"))

    @app.errorhandler(InternalServerError)
    def handle_server_error(e):
        logger.error(f"500 error: {e}", exc_info=True)
        flash("An unexpected error occurred. Please try again.", "error")
        return redirect(url_for("main.index"))

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    debug_mode = os.environ.get("FLASK_DEBUG", "1") == "1"
    app.run(debug=debug_mode, port=int(os.environ.get("PORT", "5000")))
