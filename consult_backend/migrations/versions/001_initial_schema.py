"""Initial schema — users, profiles, specialties and refresh-token sessions.

Revision: 001_initial_schema
Created:  2026-10-19

Append-only:
  This file must NEVER be edited after it has been applied to any database.
  If a schema change is required, create a NEW migration file.

Creation order:
  1. Tables in FK dependency order (users, specialties → patient_profiles,
     doctor_profiles, user_sessions). The enum types user_role_enum and
     gender_enum are created together with the first table that uses them.
  2. Indexes

ON DELETE policies:
  patient_profiles.user_id     → CASCADE   (profile owned by user)
  doctor_profiles.user_id      → CASCADE   (profile owned by user)
  doctor_profiles.specialty_id → SET NULL  (retiring a specialty keeps doctors)
  user_sessions.user_id        → CASCADE   (session owned by user)
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# ── Alembic revision identifiers ──────────────────────────────────────────
revision: str = "001_initial_schema"
down_revision: str | None = None      # first migration — no parent
branch_labels: tuple | None = None
depends_on: tuple | None = None


_ROLE_ENUM = sa.Enum("PATIENT", "DOCTOR", "ADMIN", name="user_role_enum")
_GENDER_ENUM = sa.Enum("MALE", "FEMALE", "OTHER", name="gender_enum")


def upgrade() -> None:
    """Apply the full initial schema."""

    # ── Step 1: users ──────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("role", _ROLE_ENUM, nullable=False),
        sa.Column(
            "is_active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint(
            "email LIKE '%@%'",
            name="ck_users_email_format",
        ),
    )

    # ── Step 2: specialties ────────────────────────────────────────────────
    op.create_table(
        "specialties",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(191), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "is_active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_specialties"),
        sa.UniqueConstraint("name", name="uq_specialties_name"),
    )

    # ── Step 3: patient_profiles ───────────────────────────────────────────
    op.create_table(
        "patient_profiles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_patient_profiles_user"),
            nullable=False,
        ),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", _GENDER_ENUM, nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("medical_history", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_patient_profiles"),
        sa.UniqueConstraint("user_id", name="uq_patient_profiles_user"),
    )

    # ── Step 4: doctor_profiles ────────────────────────────────────────────
    op.create_table(
        "doctor_profiles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_doctor_profiles_user"),
            nullable=False,
        ),
        sa.Column(
            "specialty_id",
            sa.Integer(),
            sa.ForeignKey("specialties.id", ondelete="SET NULL", name="fk_doctor_profiles_specialty"),
            nullable=True,
        ),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("years_of_experience", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rating_average", sa.Float(), nullable=False, server_default="0"),
        sa.Column("rating_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_doctor_profiles"),
        sa.UniqueConstraint("user_id", name="uq_doctor_profiles_user"),
    )

    # ── Step 5: user_sessions ──────────────────────────────────────────────
    # refresh_token_hash holds the SHA-256 hex digest, never the raw token.
    op.create_table(
        "user_sessions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_user_sessions_user"),
            nullable=False,
        ),
        sa.Column("refresh_token_hash", sa.String(64), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_user_sessions"),
        sa.UniqueConstraint("refresh_token_hash", name="uq_user_sessions_refresh_token_hash"),
    )

    # ── Step 6: indexes ────────────────────────────────────────────────────
    op.create_index("idx_users_role", "users", ["role"])
    op.create_index("idx_doctor_profiles_specialty", "doctor_profiles", ["specialty_id"])
    op.create_index("idx_user_sessions_user", "user_sessions", ["user_id"])
    op.create_index("idx_user_sessions_expires_at", "user_sessions", ["expires_at"])


def downgrade() -> None:
    """Drop all objects created in upgrade(), in reverse dependency order."""
    op.drop_index("idx_user_sessions_expires_at",  table_name="user_sessions")
    op.drop_index("idx_user_sessions_user",        table_name="user_sessions")
    op.drop_index("idx_doctor_profiles_specialty", table_name="doctor_profiles")
    op.drop_index("idx_users_role",                table_name="users")

    op.drop_table("user_sessions")
    op.drop_table("doctor_profiles")
    op.drop_table("patient_profiles")
    op.drop_table("specialties")
    op.drop_table("users")

    # Enum types last (tables that reference them must be gone first).
    bind = op.get_bind()
    _GENDER_ENUM.drop(bind, checkfirst=True)
    _ROLE_ENUM.drop(bind, checkfirst=True)
