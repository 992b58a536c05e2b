"""
app/__init__.py — Flask application factory.

Pattern: create_app(config_name) creates and returns a configured Flask app.
         Nothing is initialised at import time, which enables:
           - Multiple isolated test app instances (each with its own DB,
             secrets and clock)
           - `alembic` and `flask` CLI commands without starting the server

Responsibilities:
  1. Load configuration from config_by_name[config_name]
  2. Initialise SQLAlchemy and the auth collaborators (codec, verifier, clock)
  3. Register all route blueprints under /api/v1
  4. Register global error handlers (AppError → JSON, Exception → 500)
  5. Register CORS headers and CLI commands

Note on model imports:
  All model modules are imported inside create_app() so that SQLAlchemy's
  metadata is populated before create_all() or Alembic inspects it.
"""

from __future__ import annotations

import traceback

from flask import Flask, jsonify, request
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from consult_backend.config import config_by_name, validate_production_config


# ── Application factory ────────────────────────────────────────────────────

def create_app(config_name: str = "development") -> Flask:
    """
    Creates and returns a configured Flask application instance.

    Args:
        config_name: One of "development", "testing", "production".
                     Defaults to "development".
    """
    app = Flask(__name__)

    # ── Configuration ──────────────────────────────────────────────────────
    config_class = config_by_name.get(config_name, config_by_name["development"])
    app.config.from_object(config_class)

    if config_name == "production":
        validate_production_config(app)  # raises ValueError if misconfigured

    # ── Extensions ─────────────────────────────────────────────────────────
    # Import here (not at module top) to avoid circular imports.
    from consult_backend.app.extensions import db, init_auth
    db.init_app(app)
    init_auth(app)

    # ── Model registration ─────────────────────────────────────────────────
    # The imports are unused by name; populating MetaData is the point.
    with app.app_context():
        from consult_backend.app.models import (  # noqa: F401
            profile,
            specialty,
            user,
            user_session,
        )

    _register_blueprints(app)
    _register_error_handlers(app)
    _register_cors(app)

    from consult_backend.app.cli import register_commands
    register_commands(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """Registers all route blueprints under the /api/v1 prefix."""
    from consult_backend.app.routes.admin import admin_bp
    from consult_backend.app.routes.auth import auth_bp
    from consult_backend.app.routes.health import health_bp

    app.register_blueprint(auth_bp,   url_prefix="/api/v1/auth")
    app.register_blueprint(admin_bp,  url_prefix="/api/v1/admin")
    app.register_blueprint(health_bp, url_prefix="/api/v1")


def _register_error_handlers(app: Flask) -> None:
    """
    Registers global error handlers.

    Handlers:
      AppError        → {"error": {code, message, details?}} with its HTTP status
      ValidationError → 400 VALIDATION_ERROR with one {field, message} per problem
      HTTPException   → JSON envelope for 404 / 405 / malformed requests
      Exception       → 500 INTERNAL_ERROR; traceback logged, never returned
    """
    from consult_backend.app.errors import AppError, ErrorCode

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        """Routes never catch AppError; they let it propagate here."""
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        details = _flatten_validation_messages(error.messages)
        body = AppError(
            ErrorCode.VALIDATION_ERROR,
            "Validation failed",
            400,
            details=details,
        ).to_dict()
        return jsonify(body), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        codes = {
            404: ErrorCode.NOT_FOUND,
            405: ErrorCode.METHOD_NOT_ALLOWED,
            400: ErrorCode.VALIDATION_ERROR,
        }
        code = codes.get(error.code, ErrorCode.INTERNAL_ERROR)
        return jsonify({"error": {"code": code, "message": error.description}}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        """
        Catches all unhandled exceptions and returns a generic 500 response.

        The traceback goes to the application logger. Outside DEBUG the
        message is generic; stack traces never leave the server.
        """
        app.logger.error(
            "Unhandled exception: %s\n%s",
            str(error),
            traceback.format_exc(),
        )
        message = "An unexpected error occurred. Please try again later."
        if app.config.get("DEBUG"):
            message = f"{type(error).__name__}: {error}"
        return jsonify({
            "error": {
                "code": ErrorCode.INTERNAL_ERROR,
                "message": message,
            }
        }), 500


def _register_cors(app: Flask) -> None:
    """
    Adds CORS headers for the configured frontend origins.

    Credentials are allowed because the refresh token travels as a cookie,
    which rules out the `*` wildcard: only listed origins are reflected.
    In DEBUG/TESTING any origin is reflected for local frontends.
    """

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allow_any = bool(app.config.get("DEBUG") or app.config.get("TESTING"))

        if origin and (allow_any or origin in app.config.get("CORS_ORIGINS", [])):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, PATCH, DELETE, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"

        return response


def _flatten_validation_messages(messages, prefix: str = "") -> list[dict]:
    """
    Turns marshmallow's nested messages dict into a flat list of
    {"field": "<dotted.path>", "message": "..."} entries.

    Schema-level errors (key "_schema") carry no field.
    """
    details: list[dict] = []
    if isinstance(messages, dict):
        for key, value in messages.items():
            if key == "_schema":
                path = prefix
            else:
                path = f"{prefix}.{key}" if prefix else str(key)
            details.extend(_flatten_validation_messages(value, path))
    elif isinstance(messages, list):
        for item in messages:
            if isinstance(item, (dict, list)):
                details.extend(_flatten_validation_messages(item, prefix))
            else:
                entry = {"message": str(item)}
                if prefix:
                    entry["field"] = prefix
                details.append(entry)
    else:
        entry = {"message": str(messages)}
        if prefix:
            entry["field"] = prefix
        details.append(entry)
    return details
