"""
errors.py — AppError base class and error code registry.

Every error returned by the API uses a code defined here. Codes are a
contract with clients (they drive localised messages on the frontend) and
do not change once published; messages are human-readable prose and may be
reworded at any time.

Never conflate 401 (unauthenticated) with 403 (authenticated but not allowed).
"""

from __future__ import annotations


class AppError(Exception):

    def __init__(
            self,
            code: str,
            message: str,
            http_status: int,
            details: list[dict] | None = None,
    ) -> None:
        super().__init__(message)
        self.code        = code
        self.message     = message
        self.http_status = http_status
        self.details     = details  # field-level problems, validation errors only

    def to_dict(self) -> dict:
        payload = {
            "code":    self.code,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return {"error": payload}

    def __repr__(self) -> str:
        return (
            f"AppError(code={self.code!r}, "
            f"http_status={self.http_status}, "
            f"message={self.message!r})"
        )


# ── Error Code Registry ────────────────────────────────────────────────────
#
# Organised by category. HTTP status is indicated in the comment.
# These are the string values sent in the API response.
# ──────────────────────────────────────────────────────────────────────────

class ErrorCode:

    # ── Input Errors (400) ─────────────────────────────────────────────────
    VALIDATION_ERROR           = "VALIDATION_ERROR"

    # ── Conflict Errors (409) ──────────────────────────────────────────────
    USER_EXISTS                = "USER_EXISTS"

    # ── Not Found Errors (404 / 405) ───────────────────────────────────────
    USER_NOT_FOUND             = "USER_NOT_FOUND"
    NOT_FOUND                  = "NOT_FOUND"
    METHOD_NOT_ALLOWED         = "METHOD_NOT_ALLOWED"

    # ── Credential / Session Errors ────────────────────────────────────────
    INVALID_CREDENTIALS        = "INVALID_CREDENTIALS"    # 401, unknown email OR wrong password
    ACCOUNT_DEACTIVATED        = "ACCOUNT_DEACTIVATED"    # 403
    INVALID_REFRESH_TOKEN      = "INVALID_REFRESH_TOKEN"  # 401
    REFRESH_TOKEN_EXPIRED      = "REFRESH_TOKEN_EXPIRED"  # 401
    REFRESH_TOKEN_MISSING      = "REFRESH_TOKEN_MISSING"  # 401, no refresh cookie
    TOKEN_REUSE_DETECTED       = "TOKEN_REUSE_DETECTED"   # 401, all sessions revoked

    # ── Bearer Token Errors (401) / Role Errors (403) ──────────────────────
    TOKEN_MISSING              = "TOKEN_MISSING"          # 401
    TOKEN_INVALID              = "TOKEN_INVALID"          # 401
    TOKEN_EXPIRED              = "TOKEN_EXPIRED"          # 401
    FORBIDDEN                  = "FORBIDDEN"              # 403

    # ── System Errors (500) ────────────────────────────────────────────────
    INTERNAL_ERROR             = "INTERNAL_ERROR"
