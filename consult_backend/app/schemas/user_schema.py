"""
schemas/user_schema.py — User projection returned by /auth/me, /auth/login and
/auth/register, plus the admin status-change payload.

password_hash is not a field here, so it can never be serialised.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields


class SpecialtySchema(Schema):
    id = fields.Int()
    name = fields.Str()


class PatientProfileSchema(Schema):
    date_of_birth = fields.Date(data_key="dateOfBirth", allow_none=True)
    gender = fields.Str(allow_none=True)
    phone = fields.Str(allow_none=True)
    address = fields.Str(allow_none=True)
    medical_history = fields.Str(data_key="medicalHistory", allow_none=True)


class DoctorProfileSchema(Schema):
    specialty = fields.Nested(SpecialtySchema, allow_none=True)
    bio = fields.Str(allow_none=True)
    years_of_experience = fields.Int(data_key="yearsOfExperience")
    rating_average = fields.Float(data_key="ratingAverage")
    rating_count = fields.Int(data_key="ratingCount")


class UserSchema(Schema):
    id = fields.Int()
    email = fields.Str()
    full_name = fields.Str(data_key="fullName")
    role = fields.Str()
    is_active = fields.Bool(data_key="isActive")
    created_at = fields.DateTime(data_key="createdAt")
    patient_profile = fields.Nested(PatientProfileSchema, data_key="patientProfile", allow_none=True)
    doctor_profile = fields.Nested(DoctorProfileSchema, data_key="doctorProfile", allow_none=True)


class UserStatusSchema(Schema):
    """PATCH /admin/users/<id>/status"""

    class Meta:
        unknown = EXCLUDE

    is_active = fields.Bool(required=True, data_key="isActive")
