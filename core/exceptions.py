"""
Custom exceptions for ReBuy Web.

Exception Hierarchy:
    RebuyWebError (base)
    ├── ApiTransportError       - Backend unreachable / timed out (network)
    ├── ApiHTTPError            - Backend answered with 4xx/5xx
    │   └── AuthExpiredError    - 401, token missing or expired
    ├── ResponseSchemaError     - Backend payload did not match the expected shape
    ├── ValidationError         - Form input rejected before any network call
    └── InvalidTransitionError  - Offer / delivery state does not allow the action

Usage:
    Views catch these locally and flash a message; prior state is left intact.
    AuthExpiredError is handled app-wide: session cleared, redirect to login.
"""

from typing import Optional, Dict, Any


class RebuyWebError(Exception):
    """
    Base exception for all ReBuy Web errors.

    All custom exceptions inherit from this class, allowing callers to catch
    all application-specific errors with a single except clause if needed.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# TRANSPORT / HTTP ERRORS - raised by core.api_client
# =============================================================================

class ApiTransportError(RebuyWebError):
    """
    The backend could not be reached.

    Covers connection refused, DNS failure and request timeouts.
    Nothing was applied on the backend side (as far as the client knows).
    """

    def __init__(self, method: str, path: str, reason: str):
        message = f"Could not reach marketplace backend ({method} {path}): {reason}"
        details = {
            "method": method,
            "path": path,
            "resolution": "Check API_BASE_URL and that the backend is running"
        }
        super().__init__(message, details)
        self.method = method
        self.path = path
        self.reason = reason


class ApiHTTPError(RebuyWebError):
    """
    The backend answered with an error status.

    The backend usually supplies a human-readable reason in a
    ``message`` (or ``error``) field; that text becomes the exception message
    so views can flash it directly.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        method: str = "",
        path: str = "",
        payload: Optional[Dict[str, Any]] = None
    ):
        details = {"status_code": status_code}
        if method:
            details["method"] = method
        if path:
            details["path"] = path
        super().__init__(message, details)
        self.status_code = status_code
        self.method = method
        self.path = path
        self.payload = payload or {}


class AuthExpiredError(ApiHTTPError):
    """
    The bearer token was rejected (HTTP 401) or no token was available.

    There is no refresh flow: the app handler clears the session and sends
    the user back to the login page for their scope.
    """

    def __init__(self, scope: str = "user", message: str = "Session expired. Please log in again.",
                 method: str = "", path: str = ""):
        super().__init__(401, message, method, path)
        self.scope = scope


# =============================================================================
# BOUNDARY / INPUT ERRORS
# =============================================================================

class ResponseSchemaError(RebuyWebError):
    """
    A backend payload could not be parsed into the expected model.

    Raised by the models' ``from_dict`` constructors.
    """

    def __init__(self, model: str, problem: str):
        message = f"Unexpected {model} payload from backend: {problem}"
        super().__init__(message, {"model": model})
        self.model = model
        self.problem = problem


class ValidationError(RebuyWebError):
    """
    User input failed client-side validation.

    ``field_errors`` maps form field name -> message; templates use it to
    annotate the offending inputs. Raised before any network call.
    """

    def __init__(self, field_errors: Dict[str, str]):
        message = "; ".join(f"{name}: {msg}" for name, msg in field_errors.items())
        super().__init__(message or "Invalid input", {"fields": sorted(field_errors)})
        self.field_errors = dict(field_errors)


class InvalidTransitionError(RebuyWebError):
    """
    The requested action is not allowed from the entity's current state.

    Examples: approving an already rejected offer, assigning a carrier to an
    order that is not Ready.
    """

    def __init__(self, entity: str, current_state: str, action: str):
        message = f"Cannot {action} {entity} in state '{current_state}'"
        details = {"entity": entity, "state": current_state, "action": action}
        super().__init__(message, details)
        self.entity = entity
        self.current_state = current_state
        self.action = action
