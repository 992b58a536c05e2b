"""
routes/admin.py — Admin account management.

Endpoints (url_prefix=/api/v1/admin, ADMIN role required):
  PATCH  /admin/users/<id>/status  → 200
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from consult_backend.app.constants import Role
from consult_backend.app.extensions import build_auth_service
from consult_backend.app.middleware.auth_middleware import require_auth, require_role
from consult_backend.app.schemas.user_schema import UserSchema, UserStatusSchema
from consult_backend.app.services.result import unwrap

admin_bp = Blueprint("admin", __name__)


@admin_bp.route("/users/<int:user_id>/status", methods=["PATCH"])
@require_auth
@require_role(Role.ADMIN)
def set_user_status(user_id: int):
    """PATCH /admin/users/<id>/status — Activate or deactivate an account."""
    data = UserStatusSchema().load(request.get_json(force=True, silent=True) or {})
    user = unwrap(build_auth_service().set_user_active(user_id, data["is_active"]))
    return jsonify({"data": UserSchema().dump(user)}), 200
