"""
extensions.py — Flask extension singletons and auth component wiring.

Pattern:
    1. Create the extension object here (no app attached yet).
    2. Call init_app(app) inside the app factory in app/__init__.py.
    3. Import `db` from here wherever a model or the request session is needed.

The auth collaborators (token codec, credential verifier, clock) are built
from the app config by init_auth() and stored on `app.extensions["auth"]`.
Per request, build_auth_service() combines them with the request-scoped
SQLAlchemy session. Nothing auth-related lives in module globals, so each
test app gets its own secrets, TTLs and clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy

from consult_backend.app.clock import Clock, utc_now
from consult_backend.app.security.passwords import CredentialVerifier
from consult_backend.app.security.tokens import TokenCodec

db = SQLAlchemy()

AUTH_EXTENSION_KEY = "auth"


@dataclass(frozen=True)
class AuthComponents:
    codec: TokenCodec
    verifier: CredentialVerifier
    clock: Clock
    refresh_ttl: timedelta


def init_auth(app: Flask, clock: Clock | None = None) -> AuthComponents:
    """
    Builds the auth collaborators from app.config and registers them on the app.

    Call again with a different `clock` to replace them (tests do this to
    control token and session expiry).
    """
    clock = clock or utc_now
    components = AuthComponents(
        codec=TokenCodec(
            access_secret=app.config["JWT_SECRET"],
            refresh_secret=app.config["JWT_REFRESH_SECRET"],
            access_ttl=app.config["JWT_ACCESS_EXPIRE"],
            refresh_ttl=app.config["JWT_REFRESH_EXPIRE"],
            algorithm=app.config.get("JWT_ALGORITHM", "HS256"),
            clock=clock,
        ),
        verifier=CredentialVerifier(rounds=app.config.get("BCRYPT_LOG_ROUNDS", 10)),
        clock=clock,
        refresh_ttl=app.config.get("REFRESH_SESSION_EXPIRE", app.config["JWT_REFRESH_EXPIRE"]),
    )
    app.extensions[AUTH_EXTENSION_KEY] = components
    return components


def get_auth_components() -> AuthComponents:
    return current_app.extensions[AUTH_EXTENSION_KEY]


def build_auth_service(session=None):
    """Returns an AuthService bound to `session` (default: the request's db.session)."""
    # Imported here: the services import models, which import `db` from this module.
    from consult_backend.app.services.auth_service import AuthService
    from consult_backend.app.services.session_store import SessionStore
    from consult_backend.app.services.user_directory import UserDirectory

    session = session if session is not None else db.session
    components = get_auth_components()
    return AuthService(
        users=UserDirectory(session),
        sessions=SessionStore(session, clock=components.clock),
        codec=components.codec,
        verifier=components.verifier,
        db_session=session,
        clock=components.clock,
        refresh_ttl=components.refresh_ttl,
    )
