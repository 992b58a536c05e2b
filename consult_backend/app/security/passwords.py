"""
security/passwords.py — bcrypt password hashing and account checks.

Raw passwords are never stored and never logged.
"""

from __future__ import annotations

import bcrypt


class AccountDeactivated(Exception):
    """The account exists but has been deactivated by an admin."""


class CredentialVerifier:

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds
        self._dummy_hash: bytes | None = None

    def hash_password(self, plain: str) -> str:
        return bcrypt.hashpw(
            plain.encode("utf-8"),
            bcrypt.gensalt(rounds=self._rounds),
        ).decode("utf-8")

    def verify_password(self, plain: str, password_hash: str) -> bool:
        # bcrypt.checkpw compares in constant time. A malformed stored hash
        # (or an over-long password) raises ValueError; treat it as a mismatch.
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            return False

    def burn_verification(self, plain: str) -> None:
        """
        Runs one bcrypt check against a throwaway hash.

        Called when a login names an unknown email, so that the response takes
        about as long as a wrong-password response for a real account.
        """
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=self._rounds))
        try:
            bcrypt.checkpw(plain.encode("utf-8"), self._dummy_hash)
        except ValueError:
            pass

    @staticmethod
    def assert_active(user) -> None:
        if not user.is_active:
            raise AccountDeactivated("Account is deactivated")
