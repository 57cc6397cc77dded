"""Error taxonomy for request construction and response classification."""

from __future__ import annotations

from enum import Enum

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."
NETWORK_ERROR_MESSAGE = "Unable to connect. Check your internet connection."
AUTHENTICATION_ERROR_MESSAGE = "Authentication failed. Please log in again."
PERMISSION_ERROR_MESSAGE = "You don't have permission to access this."
NOT_FOUND_ERROR_MESSAGE = "The requested item could not be found."


class APIErrorKind(str, Enum):
    NETWORK = "network"
    INVALID_RESPONSE = "invalid_response"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    SERVER = "server"
    DECODING = "decoding"
    UNKNOWN = "unknown"


class MacroLensError(Exception):
    """Base error for the macrolens package."""


class RequestBuilderError(MacroLensError):
    """Raised when an outbound request cannot be assembled."""


class InvalidEndpointError(RequestBuilderError):
    """Raised when base URL and path do not form a well-formed URL."""

    def __init__(self, endpoint: str) -> None:
        super().__init__(f"Invalid URL for endpoint: {endpoint}")
        self.endpoint = endpoint


class EncodingFailedError(RequestBuilderError):
    """Raised when a payload cannot be serialized to JSON."""

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"Failed to encode parameters: {cause}")
        self.cause = cause


class APIError(MacroLensError):
    """Base class for classified response-pipeline failures."""

    kind: APIErrorKind = APIErrorKind.UNKNOWN
    user_message: str = GENERIC_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = self.user_message if message is None else message
        super().__init__(self.message)


class NetworkError(APIError):
    """Transport-level failure; the request never produced a response."""

    kind = APIErrorKind.NETWORK
    user_message = NETWORK_ERROR_MESSAGE

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Network error: {cause}")
        self.cause = cause


class InvalidResponseError(APIError):
    kind = APIErrorKind.INVALID_RESPONSE
    user_message = "Invalid response from server"


class UnauthorizedError(APIError):
    kind = APIErrorKind.UNAUTHORIZED
    user_message = AUTHENTICATION_ERROR_MESSAGE


class ForbiddenError(APIError):
    kind = APIErrorKind.FORBIDDEN
    user_message = PERMISSION_ERROR_MESSAGE


class NotFoundError(APIError):
    kind = APIErrorKind.NOT_FOUND
    user_message = NOT_FOUND_ERROR_MESSAGE


class APIValidationError(APIError):
    """Client-side rejection (4xx) or an unsuccessful envelope."""

    kind = APIErrorKind.VALIDATION

    def __init__(self, message: str) -> None:
        super().__init__(message)

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return self.message


class ServerError(APIError):
    kind = APIErrorKind.SERVER

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Server error (Code: {status_code})")
        self.status_code = status_code

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return self.message


class DecodingError(APIError):
    """Response body did not match the expected shape."""

    kind = APIErrorKind.DECODING
    user_message = "Failed to parse server response"

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Decoding error: {cause}")
        self.cause = cause


class UnknownAPIError(APIError):
    kind = APIErrorKind.UNKNOWN
