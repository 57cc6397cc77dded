"""Unit tests for the API error taxonomy and server error bodies."""

from __future__ import annotations

import pytest

from macrolens.core.errors import APIError
from macrolens.core.errors import APIErrorKind
from macrolens.core.errors import APIValidationError
from macrolens.core.errors import DecodingError
from macrolens.core.errors import EncodingFailedError
from macrolens.core.errors import ForbiddenError
from macrolens.core.errors import InvalidEndpointError
from macrolens.core.errors import InvalidResponseError
from macrolens.core.errors import MacroLensError
from macrolens.core.errors import NetworkError
from macrolens.core.errors import NotFoundError
from macrolens.core.errors import RequestBuilderError
from macrolens.core.errors import ServerError
from macrolens.core.errors import UnauthorizedError
from macrolens.core.errors import UnknownAPIError
from macrolens.schemas.error import ErrorCode
from macrolens.schemas.error import ErrorResponse


def test_error_kinds_form_a_closed_set() -> None:
    errors: list[APIError] = [
        NetworkError(OSError("down")),
        InvalidResponseError(),
        UnauthorizedError(),
        ForbiddenError(),
        NotFoundError(),
        APIValidationError("bad"),
        ServerError(502),
        DecodingError(ValueError("shape")),
        UnknownAPIError(),
    ]

    assert {error.kind for error in errors} == set(APIErrorKind)
    assert all(isinstance(error, MacroLensError) for error in errors)


def test_user_messages() -> None:
    assert UnauthorizedError().user_message == "Authentication failed. Please log in again."
    assert APIValidationError("Email is taken").user_message == "Email is taken"
    assert ServerError(503).user_message == "Server error (Code: 503)"
    assert str(NotFoundError()) == "The requested item could not be found."


def test_builder_errors_are_separate_from_api_errors() -> None:
    cause = TypeError("not serializable")

    assert isinstance(InvalidEndpointError("/x"), RequestBuilderError)
    assert not isinstance(EncodingFailedError(cause), APIError)
    assert EncodingFailedError(cause).cause is cause
    assert str(InvalidEndpointError("/x")) == "Invalid URL for endpoint: /x"


def test_validation_error_body_prefers_first_field_message() -> None:
    body = ErrorResponse.model_validate(
        {
            "success": False,
            "message": "Validation failed",
            "errors": [
                {"field": "email", "message": "Invalid email format"},
                {"field": "password", "message": "Password must be at least 8 characters"},
            ],
            "code": "VALIDATION_ERROR",
        }
    )

    assert body.is_error_code(ErrorCode.VALIDATION_ERROR)
    assert body.user_friendly_message == "Invalid email format"
    assert body.failure_reason == "Invalid email format, Password must be at least 8 characters"
    assert not body.is_auth_error


@pytest.mark.parametrize(
    ("code", "auth", "relogin"),
    [
        ("INVALID_CREDENTIALS", True, False),
        ("TOKEN_EXPIRED", True, True),
        ("UNAUTHORIZED", True, True),
        ("SERVER_ERROR", False, False),
        (None, False, False),
    ],
)
def test_auth_classification(code: str | None, auth: bool, relogin: bool) -> None:
    body = ErrorResponse(message="nope", code=code)

    assert body.is_auth_error is auth
    assert body.requires_relogin is relogin


def test_unrecognised_code_falls_back_to_server_message() -> None:
    body = ErrorResponse(message="Quota exhausted", code="QUOTA")

    assert body.error_code is None
    assert body.user_friendly_message == "Quota exhausted"


def test_known_code_uses_friendly_text() -> None:
    body = ErrorResponse(message="Internal server error", code="SERVER_ERROR")

    assert body.user_friendly_message == "Server error. Please try again later."
    assert body.failure_reason == "Internal server error"
