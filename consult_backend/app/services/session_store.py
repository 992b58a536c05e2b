"""
services/session_store.py — Persistence of refresh-token sessions.

Only the SHA-256 digest of a refresh token is ever written; the raw token
is handed to the client once and never stored.

Every revocation is a single conditional UPDATE (`... WHERE revoked_at IS
NULL`). Its row count tells the caller whether *this* call revoked the
session, which is how two concurrent refreshes of the same token are told
apart without locks: exactly one of them sees rowcount == 1.

The store flushes but never commits. The caller (AuthService) owns the
transaction boundary. The UPDATEs do not synchronise UserSession objects
already loaded in the session; they are refreshed on the next commit.
"""

from __future__ import annotations

import hashlib
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from consult_backend.app.clock import Clock, as_utc, utc_now
from consult_backend.app.models.user_session import UserSession


class DuplicateHash(Exception):
    """A session with the same refresh_token_hash already exists."""


class SessionStore:

    def __init__(self, session: Session, clock: Clock = utc_now) -> None:
        self._session = session
        self._clock = clock

    @staticmethod
    def hash(raw_token: str) -> str:
        """SHA-256 hex digest of a raw refresh token."""
        return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()

    def is_active(self, record: UserSession) -> bool:
        return record.revoked_at is None and as_utc(record.expires_at) > self._clock()

    def create(
            self,
            user_id: int,
            refresh_token_hash: str,
            expires_at: datetime,
            user_agent: str | None = None,
            ip_address: str | None = None,
    ) -> UserSession:
        now = self._clock()
        record = UserSession(
            user_id=user_id,
            refresh_token_hash=refresh_token_hash,
            expires_at=expires_at,
            created_at=now,
            last_used_at=now,
            user_agent=user_agent,
            ip_address=ip_address,
        )
        self._session.add(record)
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise DuplicateHash("refresh_token_hash collision") from exc
        return record

    def find_by_hash(self, refresh_token_hash: str) -> UserSession | None:
        return self._session.execute(
            select(UserSession).where(UserSession.refresh_token_hash == refresh_token_hash)
        ).scalar_one_or_none()

    def revoke(self, session_id: int) -> bool:
        """Revokes one session. Idempotent; True only if this call revoked it."""
        return self._conditional_revoke(session_id, mark_used=False)

    def mark_rotated(self, session_id: int) -> bool:
        """
        Revokes a session because its token is being exchanged for a new one.

        Same conditional write as revoke(), also stamping last_used_at.
        Returns False if the session was already revoked, i.e. another
        request rotated or logged out this token first.
        """
        return self._conditional_revoke(session_id, mark_used=True)

    def revoke_all_for_user(self, user_id: int) -> int:
        """Revokes every active session of a user. Returns how many were revoked."""
        now = self._clock()
        result = self._session.execute(
            update(UserSession)
            .where(
                UserSession.user_id == user_id,
                UserSession.revoked_at.is_(None),
                UserSession.expires_at > now,
            )
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def _conditional_revoke(self, session_id: int, *, mark_used: bool) -> bool:
        now = self._clock()
        values = {"revoked_at": now}
        if mark_used:
            values["last_used_at"] = now
        result = self._session.execute(
            update(UserSession)
            .where(
                UserSession.id == session_id,
                UserSession.revoked_at.is_(None),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
