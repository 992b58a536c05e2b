"""tests/unit/test_passwords.py — CredentialVerifier (bcrypt)."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from consult_backend.app.security.passwords import AccountDeactivated, CredentialVerifier


@pytest.fixture
def verifier():
    return CredentialVerifier(rounds=4)


def test_hash_is_not_the_password(verifier):
    hashed = verifier.hash_password("secret1")
    assert hashed != "secret1"
    assert hashed.startswith("$2")


def test_same_password_hashes_differently(verifier):
    assert verifier.hash_password("secret1") != verifier.hash_password("secret1")


def test_verify_password(verifier):
    hashed = verifier.hash_password("secret1")
    assert verifier.verify_password("secret1", hashed) is True
    assert verifier.verify_password("secret2", hashed) is False


def test_malformed_hash_is_a_mismatch(verifier):
    assert verifier.verify_password("secret1", "not-a-bcrypt-hash") is False


def test_burn_verification_does_not_raise(verifier):
    verifier.burn_verification("anything")
    verifier.burn_verification("x" * 100)


def test_assert_active():
    CredentialVerifier.assert_active(SimpleNamespace(is_active=True))
    with pytest.raises(AccountDeactivated):
        CredentialVerifier.assert_active(SimpleNamespace(is_active=False))
