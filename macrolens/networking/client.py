"""Synchronous HTTP transport tying the request builder to the response handler."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Mapping
from typing import Any
from typing import TypeVar

import logging

import requests

from macrolens.core.config import AppSettings
from macrolens.core.config import redact_secret
from macrolens.networking.endpoints import Endpoint
from macrolens.networking.endpoints import HTTPMethod
from macrolens.networking.request_builder import FilePart
from macrolens.networking.request_builder import OutboundRequest
from macrolens.networking.request_builder import ParameterEncoding
from macrolens.networking.request_builder import RequestBuilder
from macrolens.networking.request_builder import RequestOptions
from macrolens.networking.response_handler import ResponseHandler
from macrolens.networking.response_handler import ResponseMetadata

logger = logging.getLogger(__name__)

T = TypeVar("T")

TokenProvider = Callable[[], str | None]


def _no_token() -> str | None:
    return None


class APIClient:
    """Execute catalogued API calls over a ``requests`` session.

    The client performs no retries and no token refresh; a fresh token is
    read from ``token_provider`` for every call.
    """

    def __init__(
        self,
        *,
        settings: AppSettings,
        token_provider: TokenProvider = _no_token,
        session: requests.Session | None = None,
        request_builder: RequestBuilder | None = None,
        response_handler: ResponseHandler | None = None,
    ) -> None:
        self._settings = settings
        self._token_provider = token_provider
        self._session = session or requests.Session()
        self._request_builder = request_builder or RequestBuilder(settings)
        self._response_handler = response_handler or ResponseHandler()

    def request(
        self,
        target: Endpoint | str,
        response_type: type[T] | Any,
        options: RequestOptions | None = None,
        *,
        method: HTTPMethod = HTTPMethod.GET,
    ) -> T:
        """Send a request and decode the bare response body."""
        outbound = self._build(target, options, method)
        body, response, error = self._send(outbound)
        return self._response_handler.handle(
            response_type,
            body=body,
            response=response,
            error=error,
            request=outbound,
        )

    def request_wrapped(
        self,
        target: Endpoint | str,
        response_type: type[T] | Any,
        options: RequestOptions | None = None,
        *,
        method: HTTPMethod = HTTPMethod.GET,
    ) -> T:
        """Send a request and unwrap the ``success``/``data`` envelope."""
        outbound = self._build(target, options, method)
        body, response, error = self._send(outbound)
        return self._response_handler.handle_wrapped(
            response_type,
            body=body,
            response=response,
            error=error,
            request=outbound,
        )

    def upload(
        self,
        target: Endpoint | str,
        response_type: type[T] | Any,
        file: FilePart,
        fields: Mapping[str, Any] | None = None,
        *,
        method: HTTPMethod = HTTPMethod.POST,
        headers: Mapping[str, str] | None = None,
        timeout_seconds: float | None = None,
    ) -> T:
        """Send ``file`` with string ``fields`` as multipart form data.

        Uploads use the longer resource timeout unless one is given, and the
        response is unwrapped like :meth:`request_wrapped`.
        """
        options = RequestOptions(
            payload=fields,
            headers=headers,
            timeout_seconds=timeout_seconds or self._settings.resource_timeout_seconds,
            encoding=ParameterEncoding.MULTIPART,
            file=file,
        )
        outbound = self._build(target, options, method)
        body, response, error = self._send(outbound)
        return self._response_handler.handle_wrapped(
            response_type,
            body=body,
            response=response,
            error=error,
            request=outbound,
        )

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> APIClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def _build(
        self,
        target: Endpoint | str,
        options: RequestOptions | None,
        method: HTTPMethod,
    ) -> OutboundRequest:
        outbound = self._request_builder.build(
            target,
            options,
            method=method,
            access_token=self._token_provider(),
        )
        logger.info(
            "API Request: %s %s (authorization: %s)",
            outbound.method.value,
            outbound.url,
            redact_secret(outbound.headers.get("Authorization")),
        )
        return outbound

    def _send(
        self,
        outbound: OutboundRequest,
    ) -> tuple[bytes | None, ResponseMetadata | None, BaseException | None]:
        # Session-level headers and credentials must not leak into requests.
        prepared = outbound.to_requests().prepare()
        try:
            response = self._session.send(prepared, timeout=outbound.timeout_seconds)
        except requests.RequestException as exc:
            return None, None, exc
        return response.content, ResponseMetadata.from_requests(response), None
