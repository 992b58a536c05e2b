"""
constants.py — Role, gender and status registries shared across layers.

Values are the exact strings stored in the database and sent over the wire.
"""

from __future__ import annotations


class Role:
    PATIENT = "PATIENT"
    DOCTOR  = "DOCTOR"
    ADMIN   = "ADMIN"


ROLES: tuple[str, ...] = (Role.PATIENT, Role.DOCTOR, Role.ADMIN)

# ADMIN accounts are never self-registered; they come from `flask create-admin`.
SELF_REGISTER_ROLES: tuple[str, ...] = (Role.PATIENT, Role.DOCTOR)


class Gender:
    MALE   = "MALE"
    FEMALE = "FEMALE"
    OTHER  = "OTHER"


GENDERS: tuple[str, ...] = (Gender.MALE, Gender.FEMALE, Gender.OTHER)


class AppointmentStatus:
    PENDING   = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


# from status -> statuses it may move to. CANCELLED and COMPLETED are terminal.
APPOINTMENT_TRANSITIONS: dict[str, frozenset[str]] = {
    AppointmentStatus.PENDING:   frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
}


def is_valid_appointment_transition(current: str, target: str) -> bool:
    """True if an appointment in `current` may move to `target`. Unknown statuses never may."""
    return target in APPOINTMENT_TRANSITIONS.get(current, frozenset())
