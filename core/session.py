"""
Explicit authentication session and token providers.

Login results are stored in the Flask session under the same keys the
marketplace frontend has always used ("adminToken" for the back office,
"token" / "role" / "user" for buyers and suppliers). Nothing else reads
those keys directly: views load an AuthSession, and API clients are handed a
token provider - a zero-argument callable returning the bearer token.

Two providers exist:
    SessionTokenProvider - reads the Flask session at call time (request threads)
    StaticTokenProvider  - holds a captured token (worker threads have no
                           request context, so the token is captured up front)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, MutableMapping, Optional

ADMIN_SCOPE = "admin"
USER_SCOPE = "user"

TOKEN_KEYS = {
    ADMIN_SCOPE: "adminToken",
    USER_SCOPE: "token",
}

_PROFILE_KEYS = {
    ADMIN_SCOPE: "adminData",
    USER_SCOPE: "user",
}

TokenProvider = Callable[[], Optional[str]]


@dataclass(frozen=True)
class AuthSession:
    """
    Who is logged in, for one scope.

    Admin sessions always carry role "admin" (or the backend's admin role,
    e.g. "super_admin"); user sessions carry "buyer" or "supplier".
    """

    scope: str
    token: str
    role: str
    user: Dict[str, Any] = field(default_factory=dict)

    @property
    def username(self) -> str:
        return self.user.get("username") or self.user.get("email") or ""

    @property
    def user_id(self) -> str:
        return str(self.user.get("id") or self.user.get("_id") or "")

    @property
    def is_admin(self) -> bool:
        return self.scope == ADMIN_SCOPE


def store_auth_session(storage: MutableMapping[str, Any], auth: AuthSession) -> None:
    """Persist a login result into session storage."""
    storage[TOKEN_KEYS[auth.scope]] = auth.token
    storage[_PROFILE_KEYS[auth.scope]] = dict(auth.user)
    if auth.scope == USER_SCOPE:
        storage["role"] = auth.role
    else:
        storage["adminRole"] = auth.role


def load_auth_session(storage: MutableMapping[str, Any], scope: str) -> Optional[AuthSession]:
    """Rebuild the AuthSession for a scope, or None when not logged in."""
    token = storage.get(TOKEN_KEYS[scope])
    if not token:
        return None

    if scope == USER_SCOPE:
        role = storage.get("role", "")
    else:
        role = storage.get("adminRole", "admin")

    return AuthSession(
        scope=scope,
        token=token,
        role=role,
        user=dict(storage.get(_PROFILE_KEYS[scope]) or {}),
    )


def clear_auth_session(storage: MutableMapping[str, Any], scope: Optional[str] = None) -> None:
    """
    Forget credentials.

    Args:
        storage: Session mapping
        scope: Scope to clear; None clears both
    """
    scopes = [scope] if scope else [ADMIN_SCOPE, USER_SCOPE]
    for s in scopes:
        storage.pop(TOKEN_KEYS[s], None)
        storage.pop(_PROFILE_KEYS[s], None)
        storage.pop("role" if s == USER_SCOPE else "adminRole", None)


class StaticTokenProvider:
    """Token provider around a token captured at construction time."""

    def __init__(self, token: Optional[str]):
        self._token = token

    def __call__(self) -> Optional[str]:
        return self._token


class SessionTokenProvider:
    """
    Token provider that reads the Flask session on every call.

    Must only be called inside a request context.
    """

    def __init__(self, scope: str):
        if scope not in TOKEN_KEYS:
            raise ValueError(f"Unknown auth scope: {scope}")
        self.scope = scope

    def __call__(self) -> Optional[str]:
        from flask import session
        return session.get(TOKEN_KEYS[self.scope])

    def capture(self) -> StaticTokenProvider:
        """Freeze the current token for hand-off to a worker thread."""
        return StaticTokenProvider(self())
