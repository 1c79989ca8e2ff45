"""
Login response parsing.

Two login endpoints exist with different shapes:
    POST /api/user/login        -> {"token", "role", "user": {...}}
    POST /api/admin/auth/login  -> {"token", "admin": {...}}
Both become a core.session.AuthSession.
"""

from __future__ import annotations

from typing import Any

from core.exceptions import ResponseSchemaError
from core.session import ADMIN_SCOPE, USER_SCOPE, AuthSession
from . import fields

USER_ROLES = ("buyer", "supplier")


def parse_user_login(payload: Any) -> AuthSession:
    data = fields.require_mapping(payload, "Login")
    token = fields.text(data, "token", "Login")
    if not token:
        raise ResponseSchemaError("Login", "no token in login response")

    user = data.get("user") or {}
    role = fields.text(data, "role", "Login") or fields.text(user, "role", "Login")
    if role not in USER_ROLES:
        raise ResponseSchemaError("Login", f"unexpected role {role!r}")

    return AuthSession(scope=USER_SCOPE, token=token, role=role, user=dict(user))


def parse_admin_login(payload: Any) -> AuthSession:
    data = fields.require_mapping(payload, "AdminLogin")
    token = fields.text(data, "token", "AdminLogin")
    if not token:
        raise ResponseSchemaError("AdminLogin", "no token in login response")

    admin = data.get("admin") or {}
    role = fields.text(admin, "role", "AdminLogin", default="admin") or "admin"
    return AuthSession(scope=ADMIN_SCOPE, token=token, role=role, user=dict(admin))
