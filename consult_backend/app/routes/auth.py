"""
routes/auth.py — Authentication route handlers.

Layer rules:
  - Parse request body / cookies and validate with the matching schema
  - Call exactly ONE AuthService method and unwrap() its result
  - Set or clear the refresh-token cookie
  - Return the response envelope: {"data": {...}}

No business logic and no DB access here. AppError (raised by unwrap or the
middleware) propagates to the global error handler in app/__init__.py.

The refresh token is read from the HttpOnly cookie only, never from the
request body, so script-injected code cannot submit a token it cannot read.
It is still returned in the register/login/refresh bodies once, for
non-browser clients.

Endpoints (url_prefix=/api/v1/auth):
  POST   /auth/register  → 201
  POST   /auth/login     → 200
  POST   /auth/refresh   → 200
  POST   /auth/logout    → 200
  GET    /auth/me        → 200
"""

from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, request

from consult_backend.app.errors import AppError, ErrorCode
from consult_backend.app.extensions import build_auth_service, get_auth_components
from consult_backend.app.middleware.auth_middleware import require_auth
from consult_backend.app.schemas.auth_schema import LoginSchema, RegisterSchema
from consult_backend.app.schemas.user_schema import UserSchema
from consult_backend.app.services.result import unwrap

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/register", methods=["POST"])
def register():
    """POST /auth/register — Create a PATIENT or DOCTOR account; return tokens."""
    schema = RegisterSchema()
    data = schema.load(request.get_json(force=True, silent=True) or {})
    result = unwrap(build_auth_service().register(
        email=data["email"],
        password=data["password"],
        full_name=data["full_name"],
        role=data["role"],
        profile=schema.profile_fields(data),
        **_client_info(),
    ))
    response = jsonify({"data": _session_body(result)})
    _set_refresh_cookie(response, result["refresh_token"])
    return response, 201


@auth_bp.route("/login", methods=["POST"])
def login():
    """POST /auth/login — Authenticate with email + password; return tokens."""
    data = LoginSchema().load(request.get_json(force=True, silent=True) or {})
    result = unwrap(build_auth_service().login(
        email=data["email"],
        password=data["password"],
        **_client_info(),
    ))
    response = jsonify({"data": _session_body(result)})
    _set_refresh_cookie(response, result["refresh_token"])
    return response, 200


@auth_bp.route("/refresh", methods=["POST"])
def refresh():
    """POST /auth/refresh — Rotate the refresh-token cookie; return a new token pair."""
    raw_token = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
    if not raw_token:
        raise AppError(ErrorCode.REFRESH_TOKEN_MISSING, "Refresh token is required", 401)

    result = unwrap(build_auth_service().refresh(raw_token, **_client_info()))
    response = jsonify({"data": {
        "accessToken": result["access_token"],
        "refreshToken": result["refresh_token"],
    }})
    _set_refresh_cookie(response, result["refresh_token"])
    return response, 200


@auth_bp.route("/logout", methods=["POST"])
def logout():
    """POST /auth/logout — Revoke the cookie's session and clear the cookie. Idempotent."""
    raw_token = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
    result = unwrap(build_auth_service().logout(raw_token))
    response = jsonify({"data": result})
    _clear_refresh_cookie(response)
    return response, 200


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me():
    """GET /auth/me — Return the authenticated user's profile."""
    user = unwrap(build_auth_service().me(g.current_user.id))
    return jsonify({"data": UserSchema().dump(user)}), 200


# ── Helpers ────────────────────────────────────────────────────────────────

def _client_info() -> dict:
    """User agent and client address recorded on the session row for audit."""
    user_agent = request.user_agent.string or None
    return {"user_agent": user_agent, "ip_address": request.remote_addr}


def _session_body(result: dict) -> dict:
    return {
        "accessToken": result["access_token"],
        "refreshToken": result["refresh_token"],
        "user": UserSchema().dump(result["user"]),
    }


def _set_refresh_cookie(response, token: str) -> None:
    config = current_app.config
    max_age = int(get_auth_components().refresh_ttl.total_seconds())
    for path in config["REFRESH_COOKIE_PATHS"]:
        response.set_cookie(
            config["REFRESH_COOKIE_NAME"],
            token,
            max_age=max_age,
            path=path,
            secure=config["REFRESH_COOKIE_SECURE"],
            httponly=True,
            samesite=config["REFRESH_COOKIE_SAMESITE"],
        )


def _clear_refresh_cookie(response) -> None:
    config = current_app.config
    for path in config["REFRESH_COOKIE_PATHS"]:
        response.delete_cookie(
            config["REFRESH_COOKIE_NAME"],
            path=path,
            secure=config["REFRESH_COOKIE_SECURE"],
            httponly=True,
            samesite=config["REFRESH_COOKIE_SAMESITE"],
        )
