"""
routes/health.py — Liveness probe.

  GET /api/v1/health → 200 {"status": "ok", "service", "timestamp"}
"""

from __future__ import annotations

from flask import Blueprint, jsonify

from consult_backend.app.clock import utc_now

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health():
    return jsonify({
        "status": "ok",
        "service": "Online Health Consultation API",
        "timestamp": utc_now().isoformat(),
    }), 200
