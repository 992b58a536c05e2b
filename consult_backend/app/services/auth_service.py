"""
services/auth_service.py — Registration, login, refresh-token rotation and logout.

Responsibilities:
  - Account creation and credential checks (via UserDirectory and
    CredentialVerifier)
  - Access + refresh token issuance (via TokenCodec)
  - Refresh-token rotation with reuse detection (via SessionStore)
  - Session revocation on logout

Layer rules:
  - No imports from routes or schemas; no flask.request, flask.g or HTTP.
  - Every collaborator is passed to the constructor. extensions.build_auth_service()
    wires the production ones per request.
  - Expected failures are returned as Err values (see services/result.py),
    never raised. Routes call unwrap() to turn them into AppErrors.

Transactions:
  Each public method is one unit of work. It commits on success and rolls
  back on any SQLAlchemyError, which is reported as INTERNAL_ERROR. A failed
  rotation therefore leaves the presented session active and the request
  safe to retry.

Session lifecycle per refresh token:
  issued  --refresh-->  revoked, replaced by a newly issued session
  issued  --logout--->  revoked
  issued  --time----->  expired (expires_at passed)
  revoked --refresh-->  token reuse: every session of the user is revoked

A revoked refresh token that still carries a valid signature can only be
presented by someone holding an old copy of it. The legitimate client
already moved on to the successor token, so the copy is treated as stolen
and the user is signed out everywhere.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from consult_backend.app.clock import Clock, as_utc, utc_now
from consult_backend.app.constants import Role
from consult_backend.app.models.user import User
from consult_backend.app.security.passwords import AccountDeactivated, CredentialVerifier
from consult_backend.app.security.tokens import InvalidToken, TokenCodec, TokenPayload
from consult_backend.app.services.result import AuthErrorKind, Err, Ok, Result
from consult_backend.app.services.session_store import DuplicateHash, SessionStore
from consult_backend.app.services.user_directory import (
    DuplicateEmail,
    UserDirectory,
    normalize_email,
)

logger = logging.getLogger(__name__)

# One message for "no such email" and "wrong password".
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."
LOGOUT_MESSAGE = "Logged out successfully"


class AuthService:

    def __init__(
            self,
            *,
            users: UserDirectory,
            sessions: SessionStore,
            codec: TokenCodec,
            verifier: CredentialVerifier,
            db_session: Session,
            clock: Clock = utc_now,
            refresh_ttl: timedelta | None = None,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._codec = codec
        self._verifier = verifier
        self._db = db_session
        self._clock = clock
        self._refresh_ttl = refresh_ttl if refresh_ttl is not None else codec.refresh_ttl

    # ── Public operations ──────────────────────────────────────────────────

    def register(
            self,
            *,
            email: str,
            password: str,
            full_name: str,
            role: str,
            profile: dict | None = None,
            user_agent: str | None = None,
            ip_address: str | None = None,
    ) -> Result:
        """
        Creates a PATIENT or DOCTOR account and opens its first session.

        Ok value: {"access_token", "refresh_token", "user": User}
        Err kinds: USER_EXISTS, VALIDATION_ERROR (unknown specialty), INTERNAL_ERROR
        """
        email = normalize_email(email)
        profile = dict(profile or {})
        try:
            if self._users.find_by_email(email) is not None:
                return _user_exists()

            if role == Role.DOCTOR and profile.get("specialty_id") is not None:
                if self._users.find_active_specialty(profile["specialty_id"]) is None:
                    return Err(
                        AuthErrorKind.VALIDATION_ERROR,
                        "Validation failed",
                        details=[{"field": "specialty", "message": "Unknown specialty."}],
                    )

            user = self._users.create_user(
                email=email,
                password_hash=self._verifier.hash_password(password),
                full_name=full_name,
                role=role,
                profile=profile,
            )
            tokens = self._open_session(TokenPayload.from_user(user), user_agent, ip_address)
            self._db.commit()
        except DuplicateEmail:
            self._db.rollback()
            return _user_exists()
        except (DuplicateHash, SQLAlchemyError):
            return self._storage_failure("register")

        logger.info("Registered user id=%s role=%s", user.id, user.role)
        return Ok({**tokens, "user": user})

    def login(
            self,
            *,
            email: str,
            password: str,
            user_agent: str | None = None,
            ip_address: str | None = None,
    ) -> Result:
        """
        Checks credentials and opens a new session.

        Ok value: {"access_token", "refresh_token", "user": User}
        Err kinds: INVALID_CREDENTIALS, ACCOUNT_DEACTIVATED, INTERNAL_ERROR
        """
        try:
            user = self._users.find_by_email(email)
            if user is None:
                self._verifier.burn_verification(password)
                return _invalid_credentials()

            try:
                self._verifier.assert_active(user)
            except AccountDeactivated:
                return Err(AuthErrorKind.ACCOUNT_DEACTIVATED, "Account is deactivated")

            if not self._verifier.verify_password(password, user.password_hash):
                return _invalid_credentials()

            tokens = self._open_session(TokenPayload.from_user(user), user_agent, ip_address)
            self._db.commit()
        except (DuplicateHash, SQLAlchemyError):
            return self._storage_failure("login")

        logger.info("Opened session for user id=%s", user.id)
        return Ok({**tokens, "user": user})

    def refresh(
            self,
            raw_refresh_token: str,
            *,
            user_agent: str | None = None,
            ip_address: str | None = None,
    ) -> Result:
        """
        Exchanges a refresh token for a new access + refresh token pair.

        Ok value: {"access_token", "refresh_token"}
        Err kinds: INVALID_REFRESH_TOKEN, REFRESH_TOKEN_EXPIRED,
                   TOKEN_REUSE_DETECTED, ACCOUNT_DEACTIVATED, INTERNAL_ERROR
        """
        try:
            payload = self._codec.verify_refresh(raw_refresh_token)
        except InvalidToken:
            return Err(AuthErrorKind.INVALID_REFRESH_TOKEN, "Invalid refresh token")

        try:
            record = self._sessions.find_by_hash(self._sessions.hash(raw_refresh_token))
            if record is None or record.user_id != payload.id:
                return Err(AuthErrorKind.INVALID_REFRESH_TOKEN, "Refresh token not found")

            if as_utc(record.expires_at) <= self._clock():
                return Err(AuthErrorKind.REFRESH_TOKEN_EXPIRED, "Refresh token has expired")

            if record.revoked_at is not None:
                return self._reuse_detected(record.user_id)

            user = self._users.get(record.user_id)
            if user is None:
                return Err(AuthErrorKind.INVALID_REFRESH_TOKEN, "Refresh token not found")
            if not user.is_active:
                return Err(AuthErrorKind.ACCOUNT_DEACTIVATED, "Account is deactivated")

            # Check-and-revoke in one statement. Losing here means a concurrent
            # request presented the same token and rotated it first.
            if not self._sessions.mark_rotated(record.id):
                return self._reuse_detected(record.user_id)

            tokens = self._open_session(payload, user_agent, ip_address)
            self._db.commit()
        except (DuplicateHash, SQLAlchemyError):
            return self._storage_failure("refresh")

        logger.info("Rotated refresh session id=%s for user id=%s", record.id, payload.id)
        return Ok(tokens)

    def logout(self, raw_refresh_token: str | None) -> Result:
        """
        Revokes the session of a refresh token.

        Unknown, expired, already revoked or missing tokens are not errors:
        logout is idempotent and does not reveal whether a session existed.
        Ok value: {"message"}
        Err kinds: INTERNAL_ERROR
        """
        if raw_refresh_token:
            try:
                record = self._sessions.find_by_hash(self._sessions.hash(raw_refresh_token))
                if record is not None and self._sessions.is_active(record):
                    self._sessions.revoke(record.id)
                    self._db.commit()
            except SQLAlchemyError:
                return self._storage_failure("logout")

        return Ok({"message": LOGOUT_MESSAGE})

    def me(self, user_id: int) -> Result:
        """
        Returns the user behind an access token.

        The active flag is deliberately not checked: deactivation takes
        effect at the next login or refresh, so a live access token keeps
        working until it expires (at most JWT_ACCESS_EXPIRE).
        """
        try:
            user = self._users.get(user_id)
        except SQLAlchemyError:
            return self._storage_failure("me")
        if user is None:
            return Err(AuthErrorKind.USER_NOT_FOUND, "User not found")
        return Ok(user)

    def set_user_active(self, user_id: int, is_active: bool) -> Result:
        """
        Activates or deactivates an account (admin operation).

        Sessions are left alone: the next refresh by a deactivated user is
        refused with ACCOUNT_DEACTIVATED rather than flagged as token reuse.
        """
        try:
            user = self._users.get(user_id)
            if user is None:
                return Err(AuthErrorKind.USER_NOT_FOUND, "User not found")
            self._users.set_active(user, is_active)
            self._db.commit()
        except SQLAlchemyError:
            return self._storage_failure("set_user_active")

        logger.info("User id=%s is_active=%s", user_id, is_active)
        return Ok(user)

    # ── Internals ──────────────────────────────────────────────────────────

    def _open_session(
            self,
            payload: TokenPayload,
            user_agent: str | None,
            ip_address: str | None,
    ) -> dict:
        """Signs a token pair and stores the refresh token's hash. Does not commit."""
        access_token = self._codec.sign_access(payload)
        refresh_token = self._codec.sign_refresh(payload)
        self._sessions.create(
            user_id=payload.id,
            refresh_token_hash=self._sessions.hash(refresh_token),
            expires_at=self._clock() + self._refresh_ttl,
            user_agent=user_agent,
            ip_address=ip_address,
        )
        return {"access_token": access_token, "refresh_token": refresh_token}

    def _reuse_detected(self, user_id: int) -> Err:
        revoked = self._sessions.revoke_all_for_user(user_id)
        self._db.commit()
        logger.warning(
            "Refresh token reuse detected for user id=%s; revoked %s active session(s)",
            user_id,
            revoked,
        )
        return Err(
            AuthErrorKind.TOKEN_REUSE_DETECTED,
            "Refresh token reuse detected. All sessions have been revoked; please log in again.",
        )

    def _storage_failure(self, operation: str) -> Err:
        self._db.rollback()
        logger.exception("Storage failure during %s", operation)
        return Err(AuthErrorKind.INTERNAL_ERROR, INTERNAL_ERROR_MESSAGE)


def _invalid_credentials() -> Err:
    return Err(AuthErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)


def _user_exists() -> Err:
    return Err(AuthErrorKind.USER_EXISTS, "User with this email already exists")
