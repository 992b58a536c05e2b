"""
models/profile.py — Role-specific profile tables (patient_profiles, doctor_profiles).

Exactly one profile row exists per PATIENT or DOCTOR user, created together
with the user at registration. ADMIN users have no profile.
No business logic. No imports from services or routes.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Enum, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from consult_backend.app.constants import GENDERS
from consult_backend.app.extensions import db


class PatientProfile(db.Model):
    __tablename__ = "patient_profiles"

    id: Mapped[int] = mapped_column(primary_key=True)

    # ON DELETE CASCADE: the profile is owned by the user.
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(
        Enum(*GENDERS, name="gender_enum"),
        nullable=True,
    )
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    medical_history: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    user: Mapped["User"] = relationship(  # noqa: F821
        "User",
        back_populates="patient_profile",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<PatientProfile id={self.id} user_id={self.user_id}>"


class DoctorProfile(db.Model):
    __tablename__ = "doctor_profiles"

    id: Mapped[int] = mapped_column(primary_key=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    # ON DELETE SET NULL: retiring a specialty must not orphan doctors.
    specialty_id: Mapped[int | None] = mapped_column(
        ForeignKey("specialties.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    years_of_experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    rating_average: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    user: Mapped["User"] = relationship(  # noqa: F821
        "User",
        back_populates="doctor_profile",
    )

    specialty: Mapped["Specialty"] = relationship("Specialty")  # noqa: F821

    def __repr__(self) -> str:  # pragma: no cover
        return f"<DoctorProfile id={self.id} user_id={self.user_id}>"
