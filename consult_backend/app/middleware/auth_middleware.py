"""
middleware/auth_middleware.py — Bearer-token authentication and role checks.

The @require_auth decorator:
  1. Reads the Authorization header (expected: "Bearer <access token>")
  2. Verifies the token with the access-token codec (signature, typ, expiry)
  3. Attaches the token's identity (TokenPayload) to flask.g.current_user
  4. Raises the matching 401 AppError if any step fails

The @require_role decorator runs after @require_auth and raises 403 FORBIDDEN
when g.current_user.role is not one of the allowed roles.

Authentication only: whether the account is still active is not checked
here (see AuthService.me).
"""

from __future__ import annotations

import functools
from typing import Callable

from flask import g, request

from consult_backend.app.errors import AppError, ErrorCode
from consult_backend.app.extensions import get_auth_components
from consult_backend.app.security.tokens import ExpiredToken, InvalidToken


def require_auth(f: Callable) -> Callable:
    """
    Route decorator that enforces bearer-token authentication.

    Usage:
        @bp.route("/me")
        @require_auth
        def me():
            user_id = g.current_user.id
    """
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        _authenticate_request()
        return f(*args, **kwargs)

    return decorated


def require_role(*roles: str) -> Callable:
    """
    Route decorator that restricts a view to the given roles.

    Must be applied below @require_auth:

        @bp.route("/users/<int:user_id>/status", methods=["PATCH"])
        @require_auth
        @require_role(Role.ADMIN)
        def set_status(user_id): ...
    """
    allowed = frozenset(roles)

    def decorator(f: Callable) -> Callable:
        @functools.wraps(f)
        def decorated(*args, **kwargs):
            current_user = getattr(g, "current_user", None)
            if current_user is None:
                raise AppError(ErrorCode.TOKEN_MISSING, "Authentication required.", 401)
            if current_user.role not in allowed:
                raise AppError(
                    ErrorCode.FORBIDDEN,
                    "You do not have permission to access this resource.",
                    403,
                )
            return f(*args, **kwargs)

        return decorated

    return decorator


def _authenticate_request() -> None:
    """
    Verifies the bearer token and sets flask.g.current_user.

    Raises AppError on any failure; the global error handler renders it.
    """
    auth_header = request.headers.get("Authorization", "")

    if not auth_header:
        raise AppError(
            ErrorCode.TOKEN_MISSING,
            "Authentication required. Provide a Bearer token in the Authorization header.",
            401,
        )

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AppError(
            ErrorCode.TOKEN_INVALID,
            "Authorization header must be in the format: Bearer <token>.",
            401,
        )

    try:
        payload = get_auth_components().codec.verify_access(parts[1])
    except ExpiredToken:
        raise AppError(
            ErrorCode.TOKEN_EXPIRED,
            "The access token has expired. Use POST /auth/refresh to obtain a new one.",
            401,
        )
    except InvalidToken:
        # Bad signature, malformed token, a refresh token, missing claims.
        raise AppError(
            ErrorCode.TOKEN_INVALID,
            "The access token is invalid or has been tampered with.",
            401,
        )

    g.current_user = payload
