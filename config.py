"""
Configuration for ReBuy Web.

Every view talks to the marketplace REST backend at API_BASE_URL.
There is no local persistence - the backend owns all canonical state.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file early so environment variables are available for Config class
# This must happen before the Config class is defined
load_dotenv(override=True)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


class Config:
    """Default configuration for the Flask application."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    SESSION_COOKIE_NAME = "rebuy_session"
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")

    # Debug mode
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"
    TESTING = False

    # ==========================================================================
    # Marketplace backend
    # ==========================================================================
    # API_BASE_URL: scheme + host of the REST backend, no trailing slash
    # API_TIMEOUT_SECONDS: per-request timeout handed to requests
    # ==========================================================================
    API_BASE_URL = os.environ.get("API_BASE_URL", "http://localhost:5001").rstrip("/")
    API_TIMEOUT_SECONDS = float(os.environ.get("API_TIMEOUT_SECONDS", "10"))

    # ==========================================================================
    # Dashboards and delivery assignment
    # ==========================================================================
    # DASHBOARD_REFRESH_SECONDS: polling interval used by finance, feedback
    #   and delivery pages
    # ASSIGNMENT_THREAD_JOIN_SECONDS: how long shutdown waits on each
    #   in-flight assignment thread
    # DELIVERY_WORKFLOW_TTL_SECONDS: an admin's delivery workflow is dropped
    #   after this long without a page view (unless an assignment is running)
    # ==========================================================================
    DASHBOARD_REFRESH_SECONDS = int(os.environ.get("DASHBOARD_REFRESH_SECONDS", "30"))
    ASSIGNMENT_THREAD_JOIN_SECONDS = float(
        os.environ.get("ASSIGNMENT_THREAD_JOIN_SECONDS", "5")
    )
    DELIVERY_WORKFLOW_TTL_SECONDS = float(
        os.environ.get("DELIVERY_WORKFLOW_TTL_SECONDS", "3600")
    )

    # ==========================================================================
    # Report header (company info block)
    # ==========================================================================
    COMPANY_NAME = os.environ.get("COMPANY_NAME", "ReBuy.lk")
    COMPANY_ADDRESS = os.environ.get(
        "COMPANY_ADDRESS", "77A, Market Street, Colombo, Sri Lanka"
    )
    COMPANY_CONTACT = os.environ.get("COMPANY_CONTACT", "+94 77 321 4567")
    COMPANY_EMAIL = os.environ.get("COMPANY_EMAIL", "rebuy@gmail.com")


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = 3600  # 1 hour


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    SECRET_KEY = "test-secret-key"
    API_BASE_URL = "http://backend.test"
    ASSIGNMENT_THREAD_JOIN_SECONDS = 1.0
