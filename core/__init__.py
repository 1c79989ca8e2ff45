"""
Core module for ReBuy Web.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- session: Explicit auth session and token providers
- api_client: requests-based client for the marketplace REST backend
"""

from .exceptions import (
    RebuyWebError,
    ApiTransportError,
    ApiHTTPError,
    AuthExpiredError,
    ResponseSchemaError,
    ValidationError,
    InvalidTransitionError,
)
from .session import (
    ADMIN_SCOPE,
    USER_SCOPE,
    AuthSession,
    SessionTokenProvider,
    StaticTokenProvider,
)
from .api_client import MarketplaceAPIClient

__all__ = [
    "RebuyWebError",
    "ApiTransportError",
    "ApiHTTPError",
    "AuthExpiredError",
    "ResponseSchemaError",
    "ValidationError",
    "InvalidTransitionError",
    "ADMIN_SCOPE",
    "USER_SCOPE",
    "AuthSession",
    "SessionTokenProvider",
    "StaticTokenProvider",
    "MarketplaceAPIClient",
]
