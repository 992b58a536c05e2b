"""
services/user_directory.py — User and profile lookups/creation for the auth service.

Users are owned by user management; the auth subsystem only needs to find
them, create them at registration (with their role-specific profile), and
flip the active flag on admin request.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from consult_backend.app.constants import Role
from consult_backend.app.models.profile import DoctorProfile, PatientProfile
from consult_backend.app.models.specialty import Specialty
from consult_backend.app.models.user import EMAIL_UNIQUE_CONSTRAINT, User


class DuplicateEmail(Exception):
    """The users.email unique constraint rejected an insert."""


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _is_email_conflict(exc: IntegrityError) -> bool:
    # PostgreSQL reports the constraint name; SQLite only reports the column.
    constraint = getattr(getattr(exc.orig, "diag", None), "constraint_name", None)
    if constraint is not None:
        return constraint == EMAIL_UNIQUE_CONSTRAINT
    return "users.email" in str(exc.orig)


class UserDirectory:

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_by_email(self, email: str) -> User | None:
        return self._session.execute(
            select(User).where(User.email == normalize_email(email))
        ).scalar_one_or_none()

    def get(self, user_id: int) -> User | None:
        return self._session.get(User, user_id)

    def find_active_specialty(self, specialty_id: int) -> Specialty | None:
        specialty = self._session.get(Specialty, specialty_id)
        if specialty is None or not specialty.is_active:
            return None
        return specialty

    def create_user(
            self,
            *,
            email: str,
            password_hash: str,
            full_name: str,
            role: str,
            profile: dict | None = None,
    ) -> User:
        """
        Inserts a user plus the profile row for its role and flushes.

        `profile` holds the optional role-specific fields; keys that do not
        belong to the role's profile are ignored.

        Raises DuplicateEmail if another user with this email was inserted
        concurrently (the caller already checked, but the unique index is
        the authority). Any other integrity failure propagates unchanged.
        """
        profile = profile or {}
        user = User(
            email=normalize_email(email),
            password_hash=password_hash,
            full_name=full_name,
            role=role,
            is_active=True,
        )
        if role == Role.PATIENT:
            user.patient_profile = PatientProfile(
                date_of_birth=profile.get("date_of_birth"),
                gender=profile.get("gender"),
                phone=profile.get("phone"),
                address=profile.get("address"),
            )
        elif role == Role.DOCTOR:
            user.doctor_profile = DoctorProfile(
                specialty_id=profile.get("specialty_id"),
                bio=profile.get("bio"),
            )

        self._session.add(user)
        try:
            self._session.flush()  # populate user.id before a session row references it
        except IntegrityError as exc:
            if _is_email_conflict(exc):
                raise DuplicateEmail(user.email) from exc
            raise
        return user

    def set_active(self, user: User, is_active: bool) -> User:
        user.is_active = is_active
        self._session.flush()
        return user
