"""
HTTP client wrapper for the marketplace REST backend.

This module provides a thin wrapper around a ``requests.Session``. It owns no
domain state: every call asks the injected token provider for the current
bearer token, sends the request, and either returns decoded JSON or raises
one of the core exceptions.

THREAD SAFETY:
    - requests.Session is not guaranteed thread-safe
    - Each worker thread creates its own MarketplaceAPIClient instance
    - Request threads create one client per request (see routes.guards)

ERROR MAPPING:
    any requests.RequestException       -> ApiTransportError
    HTTP 401                            -> AuthExpiredError
    any other HTTP >= 400               -> ApiHTTPError (backend message kept)
    2xx body that is not JSON           -> ResponseSchemaError

Usage:
    client = MarketplaceAPIClient(
        base_url="http://localhost:5001",
        token_provider=SessionTokenProvider("admin"),
        scope="admin",
    )

    orders = client.get("/api/orders/admin")
    updated = client.put(f"/api/orders/{order_id}/status",
                         json={"status": "shipped", "deliveryMethod": "Uber"})
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional

import requests

from .exceptions import ApiHTTPError, ApiTransportError, AuthExpiredError, ResponseSchemaError
from .session import TokenProvider, USER_SCOPE


DEFAULT_TIMEOUT_SECONDS = 10.0


class MarketplaceAPIClient:
    """
    Authenticated JSON client for the marketplace backend.

    Attributes:
        base_url: Backend root, e.g. "http://localhost:5001"
        scope: Auth scope of the token provider ("admin" or "user"); carried
            on AuthExpiredError so the app knows which login page to use
        thread_id: ID of the thread that created this client
    """

    def __init__(
        self,
        base_url: str,
        token_provider: Optional[TokenProvider] = None,
        scope: str = USER_SCOPE,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        http_session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the client.

        Args:
            base_url: Backend root URL
            token_provider: Callable returning the bearer token (None for
                anonymous endpoints such as login and the product listing)
            scope: Auth scope, used when reporting expired sessions
            timeout_seconds: Timeout passed to every request
            http_session: Optional pre-built requests.Session (tests inject a mock)
            logger: Logger instance (creates default if not provided)

        Raises:
            ValueError: If base_url is empty
        """
        if not base_url:
            raise ValueError("base_url is required - set API_BASE_URL")

        self.base_url = base_url.rstrip("/")
        self.scope = scope
        self._token_provider = token_provider
        self._timeout = timeout_seconds
        self._http = http_session or requests.Session()
        self._http.headers.update({"Accept": "application/json"})
        self._logger = logger or logging.getLogger("rebuy_web.core.api_client")
        self._thread_id = threading.get_ident()

    @property
    def thread_id(self) -> int:
        """ID of the thread that owns this client."""
        return self._thread_id

    # =========================================================================
    # VERBS
    # =========================================================================

    def get(self, path: str, params: Optional[Dict[str, Any]] = None, auth: bool = True) -> Any:
        return self.request("GET", path, params=params, auth=auth)

    def post(self, path: str, json: Optional[Dict[str, Any]] = None, auth: bool = True) -> Any:
        return self.request("POST", path, json=json, auth=auth)

    def put(self, path: str, json: Optional[Dict[str, Any]] = None, auth: bool = True) -> Any:
        return self.request("PUT", path, json=json, auth=auth)

    def patch(self, path: str, json: Optional[Dict[str, Any]] = None, auth: bool = True) -> Any:
        return self.request("PATCH", path, json=json, auth=auth)

    def delete(self, path: str, auth: bool = True) -> Any:
        return self.request("DELETE", path, auth=auth)

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        auth: bool = True
    ) -> Any:
        """
        Send one request and decode the JSON response.

        Args:
            method: HTTP verb
            path: Path below base_url, starting with "/"
            params: Query string parameters
            json: JSON body
            auth: Whether to attach the bearer token

        Returns:
            Decoded JSON (dict or list), or {} for an empty body

        Raises:
            AuthExpiredError: No token available, or backend returned 401
            ApiHTTPError: Backend returned another error status
            ApiTransportError: Backend unreachable, timed out, or the request
                could not be sent
            ResponseSchemaError: Success response body is not JSON
        """
        headers = {}
        if auth:
            token = self._token_provider() if self._token_provider else None
            if not token:
                self._logger.warning(f"{method} {path} refused locally: no {self.scope} token")
                raise AuthExpiredError(scope=self.scope, method=method, path=path)
            headers["Authorization"] = f"Bearer {token}"

        url = f"{self.base_url}{path}"
        self._logger.debug(f"[Thread {self._thread_id}] {method} {url}")

        try:
            response = self._http.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            self._logger.error(f"[Thread {self._thread_id}] {method} {path} failed: {e}")
            raise ApiTransportError(method, path, str(e)) from e

        if response.status_code == 401:
            self._logger.warning(f"{method} {path} rejected with 401 ({self.scope} token)")
            raise AuthExpiredError(
                scope=self.scope,
                message=_error_message(response) or "Session expired. Please log in again.",
                method=method,
                path=path,
            )

        if response.status_code >= 400:
            message = _error_message(response) or f"HTTP error! status: {response.status_code}"
            self._logger.error(
                f"[Thread {self._thread_id}] {method} {path} -> {response.status_code}: {message}"
            )
            raise ApiHTTPError(
                response.status_code,
                message,
                method=method,
                path=path,
                payload=_safe_json(response),
            )

        self._logger.debug(f"[Thread {self._thread_id}] {method} {path} -> {response.status_code}")

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            self._logger.error(f"Invalid JSON from {method} {path}: {e}")
            raise ResponseSchemaError("response", f"invalid JSON from {method} {path}") from e

    def close(self) -> None:
        """Release pooled connections."""
        self._http.close()


def _safe_json(response: requests.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error_message(response: requests.Response) -> str:
    """Backend error text: {"message": ...} or {"error": ...}."""
    data = _safe_json(response)
    return str(data.get("message") or data.get("error") or "")


def make_client_factory(base_url: str, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
    """
    Build the factory the app uses for every API client.

    The returned callable takes ``(token_provider, scope)`` and creates a
    fresh MarketplaceAPIClient. Tests replace it in app.config to inject
    mocks.
    """
    def factory(token_provider: Optional[TokenProvider] = None, scope: str = USER_SCOPE) -> MarketplaceAPIClient:
        return MarketplaceAPIClient(
            base_url=base_url,
            token_provider=token_provider,
            scope=scope,
            timeout_seconds=timeout_seconds,
        )

    return factory
