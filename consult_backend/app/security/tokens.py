"""
security/tokens.py — JWT codec for access and refresh tokens.

Token design:
  - Both token kinds carry the same identity claims: id, email, role.
  - Access tokens are signed with JWT_SECRET, refresh tokens with
    JWT_REFRESH_SECRET. The secrets must differ, which is what keeps the two
    verifiers from accepting each other's tokens. A `typ` claim is checked
    as well.
  - Every token gets a random `jti`, so two tokens minted for the same user
    in the same second are still distinct strings (and hash differently in
    the session store).
  - Expiry is checked against the injected clock, not the wall clock, so
    tests can age tokens without sleeping.

No Flask imports: the codec is built once by the app factory from config.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import jwt

from consult_backend.app.clock import Clock, utc_now

ACCESS = "access"
REFRESH = "refresh"


class InvalidToken(Exception):
    """Signature, structure or claims of a token are not acceptable."""


class ExpiredToken(InvalidToken):
    """The token verified but its exp claim has passed."""


@dataclass(frozen=True)
class TokenPayload:
    id: int
    email: str
    role: str

    @classmethod
    def from_user(cls, user) -> "TokenPayload":
        return cls(id=user.id, email=user.email, role=user.role)

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "TokenPayload":
        user_id = claims.get("id")
        email = claims.get("email")
        role = claims.get("role")
        # bool is an int subclass; a `true` id is not an id.
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise InvalidToken("Token is missing a valid 'id' claim.")
        if not isinstance(email, str) or not isinstance(role, str):
            raise InvalidToken("Token is missing 'email' or 'role' claims.")
        return cls(id=user_id, email=email, role=role)

    def to_claims(self) -> dict[str, Any]:
        return {"id": self.id, "email": self.email, "role": self.role}


class TokenCodec:

    def __init__(
            self,
            *,
            access_secret: str,
            refresh_secret: str,
            access_ttl: timedelta,
            refresh_ttl: timedelta,
            algorithm: str = "HS256",
            clock: Clock = utc_now,
    ) -> None:
        if not access_secret or not refresh_secret:
            raise ValueError("Both access and refresh secrets are required.")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh tokens must be signed with different secrets.")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl
        self._algorithm = algorithm
        self._clock = clock

    @property
    def access_ttl(self) -> timedelta:
        return self._access_ttl

    @property
    def refresh_ttl(self) -> timedelta:
        return self._refresh_ttl

    def sign_access(self, payload: TokenPayload) -> str:
        return self._sign(payload, self._access_secret, self._access_ttl, ACCESS)

    def sign_refresh(self, payload: TokenPayload) -> str:
        return self._sign(payload, self._refresh_secret, self._refresh_ttl, REFRESH)

    def verify_access(self, token: str) -> TokenPayload:
        return self._verify(token, self._access_secret, ACCESS)

    def verify_refresh(self, token: str) -> TokenPayload:
        return self._verify(token, self._refresh_secret, REFRESH)

    # ── internals ──────────────────────────────────────────────────────────

    def _sign(self, payload: TokenPayload, secret: str, ttl: timedelta, token_type: str) -> str:
        now = self._clock()
        claims = {
            **payload.to_claims(),
            "typ": token_type,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "jti": secrets.token_hex(8),
        }
        return jwt.encode(claims, secret, algorithm=self._algorithm)

    def _verify(self, token: str, secret: str, token_type: str) -> TokenPayload:
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                # exp/iat are checked below against the injected clock.
                options={"verify_exp": False, "verify_iat": False, "require": ["exp", "iat"]},
            )
        except jwt.InvalidTokenError as exc:
            raise InvalidToken(f"Invalid {token_type} token.") from exc

        if claims.get("typ") != token_type:
            raise InvalidToken(f"Token is not a {token_type} token.")

        exp = claims["exp"]
        if not isinstance(exp, int) or isinstance(exp, bool):
            raise InvalidToken("Token has a malformed 'exp' claim.")
        if exp <= int(self._clock().timestamp()):
            raise ExpiredToken(f"The {token_type} token has expired.")

        return TokenPayload.from_claims(claims)
