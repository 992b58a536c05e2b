"""
models/user.py — User table definition.

No business logic. No imports from services or routes.

Users are never hard-deleted: an admin deactivates them (is_active = FALSE),
which keeps their sessions and profiles around for audit.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Enum, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import expression

from consult_backend.app.constants import ROLES
from consult_backend.app.extensions import db

EMAIL_UNIQUE_CONSTRAINT = "uq_users_email"


class User(db.Model):
    __tablename__ = "users"

    __table_args__ = (
        # Also enforced by the marshmallow Email field.
        CheckConstraint(
            "email LIKE '%@%'",
            name="ck_users_email_format",
        ),
        UniqueConstraint("email", name=EMAIL_UNIQUE_CONSTRAINT),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    # Stored lower-cased; the auth service normalises before every lookup.
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    role: Mapped[str] = mapped_column(
        Enum(*ROLES, name="user_role_enum"),
        nullable=False,
        index=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=expression.true(),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    patient_profile: Mapped["PatientProfile"] = relationship(  # noqa: F821
        "PatientProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    doctor_profile: Mapped["DoctorProfile"] = relationship(  # noqa: F821
        "DoctorProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    sessions: Mapped[list["UserSession"]] = relationship(  # noqa: F821
        "UserSession",
        back_populates="user",
        passive_deletes=True,
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User id={self.id} email={self.email!r} role={self.role}>"
