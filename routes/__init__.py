"""
Flask route blueprints for ReBuy Web.

This module contains all route handlers organized by functionality:
- main: Product listing and customer feedback
- auth: Buyer / supplier and admin login
- orders: Admin order list and status changes
- delivery: Carrier assignment workflow
- stock: Inventory and reorder requests
- offers: Supplier offers (admin decisions, supplier CRUD)
- finance: Finance ledger and feedback moderation
- reports: PDF / CSV exports and the back-office pack
- api: AJAX endpoints (dashboard polling, health)

Each blueprint is registered with the Flask app in create_app().
"""

from .main import main_bp
from .auth import auth_bp
from .orders import orders_bp
from .delivery import delivery_bp
from .stock import stock_bp
from .offers import offers_bp
from .finance import finance_bp
from .reports import reports_bp
from .api import api_bp

__all__ = [
    "main_bp",
    "auth_bp",
    "orders_bp",
    "delivery_bp",
    "stock_bp",
    "offers_bp",
    "finance_bp",
    "reports_bp",
    "api_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(delivery_bp)
    app.register_blueprint(stock_bp)
    app.register_blueprint(offers_bp)
    app.register_blueprint(finance_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(api_bp)
