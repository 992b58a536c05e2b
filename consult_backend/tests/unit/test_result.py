"""tests/unit/test_result.py — Ok / Err values and unwrap()."""

from __future__ import annotations

import pytest

from consult_backend.app.errors import AppError, ErrorCode
from consult_backend.app.services.result import AuthErrorKind, Err, Ok, unwrap


def test_unwrap_ok_returns_value():
    assert unwrap(Ok({"a": 1})) == {"a": 1}
    assert Ok(None).ok is True


def test_unwrap_err_raises_matching_app_error():
    details = [{"field": "specialty", "message": "Unknown specialty."}]
    with pytest.raises(AppError) as exc_info:
        unwrap(Err(AuthErrorKind.VALIDATION_ERROR, "Validation failed", details=details))

    err = exc_info.value
    assert err.code == ErrorCode.VALIDATION_ERROR
    assert err.http_status == 400
    assert err.to_dict() == {
        "error": {"code": "VALIDATION_ERROR", "message": "Validation failed", "details": details},
    }


@pytest.mark.parametrize("kind, code, status", [
    (AuthErrorKind.USER_EXISTS,           "USER_EXISTS",           409),
    (AuthErrorKind.INVALID_CREDENTIALS,   "INVALID_CREDENTIALS",   401),
    (AuthErrorKind.ACCOUNT_DEACTIVATED,   "ACCOUNT_DEACTIVATED",   403),
    (AuthErrorKind.INVALID_REFRESH_TOKEN, "INVALID_REFRESH_TOKEN", 401),
    (AuthErrorKind.REFRESH_TOKEN_EXPIRED, "REFRESH_TOKEN_EXPIRED", 401),
    (AuthErrorKind.TOKEN_REUSE_DETECTED,  "TOKEN_REUSE_DETECTED",  401),
    (AuthErrorKind.USER_NOT_FOUND,        "USER_NOT_FOUND",        404),
    (AuthErrorKind.INTERNAL_ERROR,        "INTERNAL_ERROR",        500),
])
def test_error_kinds_map_to_codes_and_statuses(kind, code, status):
    err = Err(kind, "message")
    assert err.ok is False
    app_error = err.to_app_error()
    assert app_error.code == code
    assert app_error.http_status == status
    assert "details" not in app_error.to_dict()["error"]
