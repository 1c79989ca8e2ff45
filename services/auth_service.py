"""Login against the marketplace backend."""

from __future__ import annotations

from typing import Dict

from core.api_client import MarketplaceAPIClient
from core.session import AuthSession
from models.user import parse_admin_login, parse_user_login
from logging_config import get_logger


logger = get_logger(__name__)


class AuthService:
    """
    Exchanges credentials for an AuthSession.

    Login calls are anonymous; a wrong password comes back as an
    ApiHTTPError (or AuthExpiredError for a 401) and is left to the view.
    """

    def __init__(self, api_client: MarketplaceAPIClient):
        self._api = api_client

    def login_user(self, credentials: Dict[str, str]) -> AuthSession:
        auth = parse_user_login(self._api.post("/api/user/login", json=credentials, auth=False))
        logger.info(f"User {auth.username or credentials.get('email')} logged in as {auth.role}")
        return auth

    def login_admin(self, credentials: Dict[str, str]) -> AuthSession:
        auth = parse_admin_login(self._api.post("/api/admin/auth/login", json=credentials, auth=False))
        logger.info(f"Admin {auth.username or credentials.get('email')} logged in")
        return auth
