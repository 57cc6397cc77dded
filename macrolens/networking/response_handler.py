"""Classify HTTP responses and decode their bodies into typed values."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import TYPE_CHECKING
from typing import TypeVar

import json
import logging

import requests

from macrolens.core.errors import GENERIC_ERROR_MESSAGE
from macrolens.core.errors import APIValidationError
from macrolens.core.errors import DecodingError
from macrolens.core.errors import ForbiddenError
from macrolens.core.errors import InvalidResponseError
from macrolens.core.errors import NetworkError
from macrolens.core.errors import NotFoundError
from macrolens.core.errors import ServerError
from macrolens.core.errors import UnauthorizedError
from macrolens.core.errors import UnknownAPIError
from macrolens.networking.wire import FIXED_FORMAT
from macrolens.networking.wire import ISO_8601
from macrolens.networking.wire import DecodingConvention
from macrolens.networking.wire import decode_body
from macrolens.schemas.envelope import APIResponse

if TYPE_CHECKING:
    from macrolens.networking.request_builder import OutboundRequest

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ERROR_MESSAGE_KEYS = ("error", "message", "detail")


@dataclass(frozen=True)
class ResponseMetadata:
    """Status line and headers of a received HTTP response."""

    status_code: int
    url: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_requests(cls, response: requests.Response) -> ResponseMetadata:
        return cls(
            status_code=response.status_code,
            url=response.url,
            headers=dict(response.headers),
        )

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code <= 299


class ResponseHandler:
    """Turn raw response parts into a decoded value or a classified error.

    ``fallback_convention`` enables one extra decode attempt with that
    convention when the default one fails. It is off unless configured.
    """

    def __init__(
        self,
        *,
        default_convention: DecodingConvention = FIXED_FORMAT,
        fallback_convention: DecodingConvention | None = None,
    ) -> None:
        self._default_convention = default_convention
        self._fallback_convention = fallback_convention

    def handle(
        self,
        target: type[T] | Any,
        *,
        body: bytes | None,
        response: ResponseMetadata | None,
        error: BaseException | None = None,
        request: OutboundRequest | None = None,
    ) -> T:
        """Validate the response and decode its body as ``target``."""
        payload = self._checked_body(body=body, response=response, error=error, request=request)
        return self._decode(target, payload)

    def handle_wrapped(
        self,
        target: type[T] | Any,
        *,
        body: bytes | None,
        response: ResponseMetadata | None,
        error: BaseException | None = None,
        request: OutboundRequest | None = None,
    ) -> T:
        """Like :meth:`handle`, then unwrap the ``success``/``data`` envelope."""
        payload = self._checked_body(body=body, response=response, error=error, request=request)
        envelope: APIResponse[Any] = self._decode(APIResponse[target], payload)

        if not envelope.success:
            reason = envelope.failure_reason(GENERIC_ERROR_MESSAGE)
            logger.error("API returned error: %s", reason)
            raise APIValidationError(reason)
        if envelope.data is None:
            logger.error("API response missing data")
            raise InvalidResponseError()
        return envelope.data

    def validate_status_code(self, status_code: int) -> None:
        if 200 <= status_code <= 299:
            return
        if status_code == 401:
            logger.error("Unauthorized (401)")
            raise UnauthorizedError()
        if status_code == 403:
            logger.error("Forbidden (403)")
            raise ForbiddenError()
        if status_code == 404:
            logger.error("Not Found (404)")
            raise NotFoundError()
        if 400 <= status_code <= 499:
            logger.error("Client error (%s)", status_code)
            raise APIValidationError(f"Request failed with status code {status_code}")
        if 500 <= status_code <= 599:
            logger.error("Server error (%s)", status_code)
            raise ServerError(status_code)
        logger.error("Unexpected status code (%s)", status_code)
        raise UnknownAPIError(f"Unexpected status code {status_code}")

    def attempt_recovery(self, target: type[T] | Any, body: bytes, original_error: BaseException) -> T:
        """Retry decoding with ISO-8601 timestamps; re-raise the original failure otherwise."""
        convention = self._fallback_convention or ISO_8601
        logger.warning("Attempting decode recovery with %s convention", convention.name)
        try:
            decoded = decode_body(target, body, convention)
        except ValueError as exc:
            logger.error("Decode recovery failed: %s", exc)
            raise DecodingError(original_error) from original_error
        logger.warning(
            "Decoded response only with the %s convention; server timestamps disagree with %s",
            convention.name,
            self._default_convention.name,
        )
        return decoded

    @staticmethod
    def is_valid_response(body: bytes | None, response: ResponseMetadata | None) -> bool:
        return response is not None and response.is_success and bool(body)

    @staticmethod
    def extract_error_message(body: bytes | None) -> str | None:
        """Pull a server-provided error text out of a JSON object body."""
        if not body:
            return None
        try:
            payload = json.loads(body)
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
        for key in _ERROR_MESSAGE_KEYS:
            value = payload.get(key)
            if isinstance(value, str):
                return value
        return None

    def _checked_body(
        self,
        *,
        body: bytes | None,
        response: ResponseMetadata | None,
        error: BaseException | None,
        request: OutboundRequest | None,
    ) -> bytes:
        if error is not None:
            logger.error("Network error: %s %s: %s", *_describe(request, response), error)
            raise NetworkError(error) from error
        if response is None:
            logger.error("No HTTP response received for %s %s", *_describe(request, response))
            raise InvalidResponseError()

        self._log_response(response, body, request)
        self.validate_status_code(response.status_code)

        if not body:
            logger.warning("Empty response data")
            raise InvalidResponseError()
        return body

    def _decode(self, target: type[T] | Any, body: bytes) -> T:
        try:
            decoded = decode_body(target, body, self._default_convention)
        except ValueError as exc:
            logger.error("Decoding error: %s", exc)
            logger.debug("Raw response: %s", body.decode("utf-8", errors="replace"))
            if self._fallback_convention is not None:
                return self.attempt_recovery(target, body, exc)
            raise DecodingError(exc) from exc
        logger.debug("Successfully decoded response")
        return decoded

    @staticmethod
    def _log_response(
        response: ResponseMetadata,
        body: bytes | None,
        request: OutboundRequest | None,
    ) -> None:
        method, url = _describe(request, response)
        size_kb = len(body or b"") / 1024.0
        level = logging.INFO if response.is_success else logging.ERROR
        logger.log(level, "Response: [%s] %s %s - Size: %.2f KB", response.status_code, method, url, size_kb)


def _describe(request: OutboundRequest | None, response: ResponseMetadata | None) -> tuple[str, str]:
    method = request.method.value if request is not None else "-"
    if response is not None and response.url:
        return method, response.url
    if request is not None:
        return method, request.url
    return method, "unknown"
