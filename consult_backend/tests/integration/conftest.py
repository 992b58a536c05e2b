"""
tests/integration/conftest.py — Fixtures and helpers for all integration tests.

Design:
  - Tests run against an in-memory SQLite database (TestingConfig default;
    set TEST_DATABASE_URL to point the suite at PostgreSQL instead).
  - Every test gets its own app, schema and clock (function-scoped), so no
    rows or sessions leak between tests and no cleanup SQL is needed.
  - The auth collaborators are rebuilt with a MutableClock; tests age
    tokens and sessions with clock.advance() instead of sleeping.
  - The test client does not keep a cookie jar. The refresh cookie is sent
    explicitly with refresh_cookie(token), which keeps every request's
    credentials visible in the test body.

Helper functions (not fixtures) are provided for common operations:
  - register(client, ...)     → response data dict with user + tokens
  - login(client, ...)        → response data dict with user + tokens
  - auth_headers(token)       → {"Authorization": "Bearer <token>"}
  - refresh_cookie(token)     → {"Cookie": "refreshToken=<token>"}
  - create_admin(app, ...)    → id of a freshly inserted ADMIN user
  - create_specialty(app, ..) → id of a freshly inserted specialty
  - active_sessions(id, now) → the user's unrevoked, unexpired sessions
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from consult_backend.app import create_app
from consult_backend.app.constants import Role
from consult_backend.app.extensions import db as _db
from consult_backend.app.extensions import get_auth_components, init_auth
from consult_backend.app.models.specialty import Specialty
from consult_backend.app.models.user_session import UserSession
from consult_backend.app.services.user_directory import UserDirectory

DEFAULT_PASSWORD = "secret1"


class MutableClock:
    """A clock callable whose time only moves when a test says so."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


# ═══════════════════════════════════════════════════════════════════════════
# App / client fixtures
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def clock():
    return MutableClock()


@pytest.fixture
def app(clock):
    """
    Creates the Flask application in 'testing' mode with a fresh schema.

    Steps:
      1. Create app with TestingConfig.
      2. Swap the auth collaborators for ones driven by `clock`.
      3. Run db.create_all() to create all tables.
      4. Yield the app; drop all tables at teardown.
    """
    flask_app = create_app("testing")
    init_auth(flask_app, clock=clock)

    with flask_app.app_context():
        _db.create_all()

    yield flask_app

    with flask_app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client without a cookie jar (see module docstring)."""
    return app.test_client(use_cookies=False)


# ═══════════════════════════════════════════════════════════════════════════
# Shared helper functions (not fixtures)
# ═══════════════════════════════════════════════════════════════════════════

def register(
    client,
    email: str = "alice@x.com",
    password: str = DEFAULT_PASSWORD,
    full_name: str = "Alice Example",
    role: str = Role.PATIENT,
    **extra,
) -> dict:
    """
    Registers a new user and returns the response data dict.
    Returns: {"user": {...}, "accessToken": "...", "refreshToken": "..."}
    """
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "fullName": full_name, "role": role, **extra},
    )
    assert resp.status_code == 201, f"register failed: {resp.get_json()}"
    return resp.get_json()["data"]


def login(client, email: str = "alice@x.com", password: str = DEFAULT_PASSWORD) -> dict:
    """
    Logs in a user and returns the response data dict.
    Returns: {"user": {...}, "accessToken": "...", "refreshToken": "..."}
    """
    resp = client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password},
    )
    assert resp.status_code == 200, f"login failed: {resp.get_json()}"
    return resp.get_json()["data"]


def auth_headers(token: str) -> dict:
    """Returns the Authorization header dict for use in test requests."""
    return {"Authorization": f"Bearer {token}"}


def refresh_cookie(token: str) -> dict:
    """Returns a Cookie header carrying the refresh token."""
    return {"Cookie": f"refreshToken={token}"}


def post_refresh(client, token: str):
    return client.post("/api/v1/auth/refresh", headers=refresh_cookie(token))


def create_admin(app, email: str = "admin@x.com", password: str = "adminpass") -> int:
    """Inserts an ADMIN directly (admins cannot self-register). Returns the user id."""
    with app.app_context():
        user = UserDirectory(_db.session).create_user(
            email=email,
            password_hash=get_auth_components().verifier.hash_password(password),
            full_name="Site Admin",
            role=Role.ADMIN,
        )
        _db.session.commit()
        return user.id


def create_specialty(app, name: str = "Cardiology", is_active: bool = True) -> int:
    with app.app_context():
        specialty = Specialty(name=name, is_active=is_active)
        _db.session.add(specialty)
        _db.session.commit()
        return specialty.id


def active_sessions(user_id: int, now: datetime) -> list[UserSession]:
    """Unrevoked, unexpired sessions of a user, oldest first. Needs an app context."""
    return list(_db.session.execute(
        select(UserSession)
        .where(
            UserSession.user_id == user_id,
            UserSession.revoked_at.is_(None),
            UserSession.expires_at > now,
        )
        .order_by(UserSession.id)
    ).scalars())
