"""
services/result.py — Ok / Err result values returned by the auth services.

Services never raise for expected failures (wrong password, replayed token,
duplicate email). They return Err with a kind from AuthErrorKind, which is
the complete list of failures a caller has to handle. Routes turn an Err
into an AppError with unwrap(); the global error handler renders it.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Union

from consult_backend.app.errors import AppError, ErrorCode


class AuthErrorKind(enum.Enum):

    VALIDATION_ERROR      = (ErrorCode.VALIDATION_ERROR, 400)
    USER_EXISTS           = (ErrorCode.USER_EXISTS, 409)
    INVALID_CREDENTIALS   = (ErrorCode.INVALID_CREDENTIALS, 401)
    ACCOUNT_DEACTIVATED   = (ErrorCode.ACCOUNT_DEACTIVATED, 403)
    INVALID_REFRESH_TOKEN = (ErrorCode.INVALID_REFRESH_TOKEN, 401)
    REFRESH_TOKEN_EXPIRED = (ErrorCode.REFRESH_TOKEN_EXPIRED, 401)
    TOKEN_REUSE_DETECTED  = (ErrorCode.TOKEN_REUSE_DETECTED, 401)
    USER_NOT_FOUND        = (ErrorCode.USER_NOT_FOUND, 404)
    INTERNAL_ERROR        = (ErrorCode.INTERNAL_ERROR, 500)

    def __init__(self, code: str, http_status: int) -> None:
        self.code = code
        self.http_status = http_status


@dataclass(frozen=True)
class Ok:
    value: Any

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: AuthErrorKind
    message: str
    details: list[dict] | None = None

    @property
    def ok(self) -> bool:
        return False

    def to_app_error(self) -> AppError:
        return AppError(
            self.kind.code,
            self.message,
            self.kind.http_status,
            details=self.details,
        )


Result = Union[Ok, Err]


def unwrap(result: Result) -> Any:
    """Returns the Ok value, or raises the AppError matching the Err."""
    if isinstance(result, Err):
        raise result.to_app_error()
    return result.value
