"""Error body schemas returned by the MacroLens API."""

from __future__ import annotations

from enum import Enum

from macrolens.core.errors import GENERIC_ERROR_MESSAGE
from macrolens.schemas.base import WireModel


class ErrorCode(str, Enum):
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    EMAIL_ALREADY_EXISTS = "EMAIL_ALREADY_EXISTS"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SERVER_ERROR = "SERVER_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    UNKNOWN = "UNKNOWN"


_SESSION_EXPIRED = "Your session has expired. Please sign in again."

_FRIENDLY_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INVALID_CREDENTIALS: "Invalid email or password. Please try again.",
    ErrorCode.EMAIL_ALREADY_EXISTS: "This email is already registered. Please sign in instead.",
    ErrorCode.USER_NOT_FOUND: "Account not found. Please check your email.",
    ErrorCode.INVALID_TOKEN: _SESSION_EXPIRED,
    ErrorCode.TOKEN_EXPIRED: _SESSION_EXPIRED,
    ErrorCode.VALIDATION_ERROR: "Please check your input and try again.",
    ErrorCode.SERVER_ERROR: "Server error. Please try again later.",
    ErrorCode.NETWORK_ERROR: "Network connection failed. Please check your internet.",
    ErrorCode.UNAUTHORIZED: "You need to sign in to access this feature.",
    ErrorCode.FORBIDDEN: "You don't have permission to perform this action.",
    ErrorCode.NOT_FOUND: "The requested resource was not found.",
    ErrorCode.RATE_LIMIT_EXCEEDED: "Too many requests. Please wait a moment and try again.",
    ErrorCode.UNKNOWN: GENERIC_ERROR_MESSAGE,
}

_AUTH_CODES = frozenset(
    {ErrorCode.INVALID_CREDENTIALS, ErrorCode.INVALID_TOKEN, ErrorCode.TOKEN_EXPIRED, ErrorCode.UNAUTHORIZED}
)
_RELOGIN_CODES = frozenset({ErrorCode.INVALID_TOKEN, ErrorCode.TOKEN_EXPIRED, ErrorCode.UNAUTHORIZED})


class FieldError(WireModel):
    """Single field-level validation issue."""

    field: str
    message: str


class ErrorResponse(WireModel):
    """Top-level error body for failed API calls."""

    success: bool = False
    message: str
    errors: list[FieldError] | None = None
    code: str | None = None

    @property
    def error_code(self) -> ErrorCode | None:
        if self.code is None:
            return None
        try:
            return ErrorCode(self.code)
        except ValueError:
            return None

    def is_error_code(self, error_code: ErrorCode) -> bool:
        return self.code == error_code.value

    @property
    def failure_reason(self) -> str:
        if self.errors:
            return ", ".join(error.message for error in self.errors)
        return self.message

    @property
    def user_friendly_message(self) -> str:
        """Display text for the error code, falling back to the server message."""
        error_code = self.error_code
        if error_code is None:
            return self.message
        if error_code is ErrorCode.VALIDATION_ERROR and self.errors:
            return self.errors[0].message
        return _FRIENDLY_MESSAGES[error_code]

    @property
    def is_auth_error(self) -> bool:
        return self.error_code in _AUTH_CODES

    @property
    def requires_relogin(self) -> bool:
        return self.error_code in _RELOGIN_CODES
