"""tests/unit/test_user_directory.py — Which integrity errors count as a duplicate email."""

from __future__ import annotations

from types import SimpleNamespace

from sqlalchemy.exc import IntegrityError

from consult_backend.app.services.user_directory import _is_email_conflict


class _PgError(Exception):
    """Stands in for a psycopg2 error, which carries the violated constraint in .diag."""

    def __init__(self, message: str, constraint_name: str) -> None:
        super().__init__(message)
        self.diag = SimpleNamespace(constraint_name=constraint_name)


def _integrity_error(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT INTO users", {}, orig)


def test_postgres_email_unique_violation_is_a_conflict():
    orig = _PgError("duplicate key value violates unique constraint", "uq_users_email")
    assert _is_email_conflict(_integrity_error(orig)) is True


def test_postgres_foreign_key_violation_is_not_a_conflict():
    orig = _PgError("insert violates foreign key constraint", "fk_doctor_profiles_specialty_id_specialties")
    assert _is_email_conflict(_integrity_error(orig)) is False


def test_sqlite_email_unique_violation_is_a_conflict():
    orig = Exception("UNIQUE constraint failed: users.email")
    assert _is_email_conflict(_integrity_error(orig)) is True


def test_sqlite_check_violation_is_not_a_conflict():
    orig = Exception("CHECK constraint failed: ck_users_email_format")
    assert _is_email_conflict(_integrity_error(orig)) is False
