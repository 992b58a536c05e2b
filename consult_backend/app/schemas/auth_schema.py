"""
schemas/auth_schema.py — Marshmallow schemas for authentication endpoints.

Validation responsibility:
  - This file: field presence, types, lengths, formats, allowed values.
  - services/auth_service.py: duplicate email, unknown specialty
    (cross-entity: require a DB lookup, not a schema concern).

Wire names are camelCase (fullName, dateOfBirth); loaded dicts use the
snake_case attribute names.

IMPORTANT: schemas inherit from marshmallow.Schema directly and need no
Flask application context, so unit tests can load them standalone.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load, pre_load, validate, validates

from consult_backend.app.constants import GENDERS, SELF_REGISTER_ROLES

# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72

_OPTIONAL_TEXT_FIELDS = ("bio", "phone", "address", "gender", "dateOfBirth", "specialty")


class RegisterSchema(Schema):
    """
    POST /auth/register

    Field rules:
      email     : valid email, at most 255 chars, stored lower-cased
      password  : 6+ chars, at most 72 bytes
      fullName  : 1–255 chars after trimming; `name` is accepted as an alias
      role      : PATIENT or DOCTOR (admins are created from the CLI)
      specialty : optional specialty id (doctors)
      bio, dateOfBirth, gender, phone, address : optional profile fields
    """

    class Meta:
        unknown = EXCLUDE

    email = fields.Email(
        required=True,
        validate=validate.Length(max=255),
    )

    password = fields.Str(
        required=True,
        load_only=True,
        validate=validate.Length(min=6, error="Password must be at least 6 characters."),
    )

    full_name = fields.Str(
        required=True,
        data_key="fullName",
        validate=validate.Length(min=1, max=255, error="Full name must be between 1 and 255 characters."),
    )

    role = fields.Str(
        required=True,
        validate=validate.OneOf(
            SELF_REGISTER_ROLES,
            error="Role must be either PATIENT or DOCTOR.",
        ),
    )

    specialty_id = fields.Int(data_key="specialty", load_default=None, allow_none=True)
    bio = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=5000))
    date_of_birth = fields.Date(data_key="dateOfBirth", load_default=None, allow_none=True)
    gender = fields.Str(load_default=None, allow_none=True, validate=validate.OneOf(GENDERS))
    phone = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=32))
    address = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=500))

    @pre_load
    def normalize_payload(self, data, **kwargs):
        """Maps `name` onto `fullName`, trims text and turns blank optionals into None."""
        if not isinstance(data, dict):
            return data
        data = dict(data)

        alias = data.pop("name", None)
        if not data.get("fullName") and alias is not None:
            data["fullName"] = alias

        for key in ("email", "fullName", "bio", "phone", "address"):
            if isinstance(data.get(key), str):
                data[key] = data[key].strip()

        for key in _OPTIONAL_TEXT_FIELDS:
            if data.get(key) == "":
                data[key] = None
        return data

    @validates("password")
    def validate_password_bytes(self, value: str, **kwargs) -> None:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")

    @post_load
    def lowercase_email(self, data, **kwargs):
        data["email"] = data["email"].lower()
        return data

    def profile_fields(self, data: dict) -> dict:
        """Splits the role-profile fields out of a loaded payload."""
        return {
            key: data.get(key)
            for key in ("specialty_id", "bio", "date_of_birth", "gender", "phone", "address")
        }


class LoginSchema(Schema):
    """
    POST /auth/login

    Credential correctness is checked in auth_service.py
    (INVALID_CREDENTIALS, 401; ACCOUNT_DEACTIVATED, 403).
    """

    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.Str(
        required=True,
        load_only=True,
        validate=validate.Length(min=1, error="Password is required."),
    )

    @pre_load
    def strip_email(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("email"), str):
            data = {**data, "email": data["email"].strip()}
        return data
