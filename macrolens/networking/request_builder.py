"""Assemble outbound API requests from endpoints and request options."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

import logging

import requests
from requests.structures import CaseInsensitiveDict

from macrolens.core.config import AppSettings
from macrolens.core.errors import EncodingFailedError
from macrolens.core.errors import InvalidEndpointError
from macrolens.networking.endpoints import Endpoint
from macrolens.networking.endpoints import HTTPMethod
from macrolens.networking.wire import encode_body
from macrolens.networking.wire import encode_form_body
from macrolens.networking.wire import form_fields

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"
FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"


class ParameterEncoding(str, Enum):
    JSON = "json"
    FORM = "form"
    MULTIPART = "multipart"


@dataclass(frozen=True)
class FilePart:
    """File attached to a multipart upload."""

    content: bytes
    file_name: str
    mime_type: str = "image/jpeg"
    field_name: str = "file"


@dataclass(frozen=True)
class RequestOptions:
    """Per-call request configuration, fixed at construction.

    With ``FORM`` encoding the payload goes to the query string for reads
    and to a urlencoded body otherwise. ``MULTIPART`` needs ``file`` and sends
    the payload mapping as string fields next to it.
    """

    payload: Any = None
    query_params: Mapping[str, Any] | None = None
    headers: Mapping[str, str] | None = None
    requires_authentication: bool = True
    timeout_seconds: float | None = None
    encoding: ParameterEncoding = ParameterEncoding.JSON
    file: FilePart | None = None

    def __post_init__(self) -> None:
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if self.file is not None and self.encoding is not ParameterEncoding.MULTIPART:
            raise ValueError("file parts require multipart encoding")


@dataclass(frozen=True)
class OutboundRequest:
    """Fully configured request value; the transport sends it as-is."""

    url: str
    method: HTTPMethod
    header_items: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    body: bytes | None = None
    timeout_seconds: float = 30.0

    @property
    def headers(self) -> CaseInsensitiveDict[str]:
        return CaseInsensitiveDict(self.header_items)

    def to_requests(self) -> requests.Request:
        return requests.Request(
            method=self.method.value,
            url=self.url,
            headers=dict(self.header_items),
            data=self.body,
        )


class RequestBuilder:
    """Build :class:`OutboundRequest` values against the configured API origin."""

    def __init__(self, settings: AppSettings) -> None:
        self._settings = settings

    def build(
        self,
        target: Endpoint | str,
        options: RequestOptions | None = None,
        *,
        method: HTTPMethod = HTTPMethod.GET,
        access_token: str | None = None,
    ) -> OutboundRequest:
        """Build a request for a catalogued endpoint or a raw path.

        ``method`` only applies to raw paths; catalogued endpoints carry
        their own verb.
        """
        options = options or RequestOptions()
        if isinstance(target, Endpoint):
            path = target.path
            method = target.method
        else:
            path = target if target.startswith("/") else f"/{target}"

        query: list[tuple[str, Any]] = []
        if method.is_read and options.query_params:
            query.extend(options.query_params.items())
        form_in_query = options.encoding is ParameterEncoding.FORM and method.is_read
        if form_in_query and options.payload is not None:
            query.extend(_checked_form_fields(options.payload))
        url = self._build_url(path, query)

        headers = self._default_headers()
        body = None
        if not form_in_query:
            body, content_type = self._encode_payload(url, options)
            headers["Content-Type"] = content_type
        if options.requires_authentication and access_token is not None:
            headers["Authorization"] = f"Bearer {access_token}"
        if options.headers:
            headers.update(options.headers)

        timeout = options.timeout_seconds or self._settings.request_timeout_seconds
        logger.debug("Built request: %s %s", method.value, url)
        return OutboundRequest(
            url=url,
            method=method,
            header_items=tuple(headers.items()),
            body=body,
            timeout_seconds=timeout,
        )

    @staticmethod
    def _encode_payload(url: str, options: RequestOptions) -> tuple[bytes | None, str]:
        if options.encoding is ParameterEncoding.MULTIPART:
            return _multipart_body(url, options.file, options.payload)
        if options.encoding is ParameterEncoding.FORM:
            if options.payload is None:
                return None, FORM_MEDIA_TYPE
            try:
                return encode_form_body(options.payload), FORM_MEDIA_TYPE
            except (TypeError, ValueError) as exc:
                raise EncodingFailedError(exc) from exc
        if options.payload is None:
            return None, JSON_MEDIA_TYPE
        try:
            return encode_body(options.payload), JSON_MEDIA_TYPE
        except (TypeError, ValueError) as exc:
            raise EncodingFailedError(exc) from exc

    def _build_url(self, path: str, query: list[tuple[str, Any]]) -> str:
        raw_url = self._settings.api_base_url + path
        try:
            parts = urlsplit(raw_url)
            hostname = parts.hostname
        except ValueError as exc:
            raise InvalidEndpointError(path) from exc
        if parts.scheme not in ("http", "https") or not hostname:
            raise InvalidEndpointError(path)

        prepared = requests.PreparedRequest()
        try:
            prepared.prepare_url(raw_url, query or None)
        except requests.RequestException as exc:
            raise InvalidEndpointError(path) from exc
        return prepared.url

    def _default_headers(self) -> CaseInsensitiveDict[str]:
        settings = self._settings
        return CaseInsensitiveDict(
            [
                ("Content-Type", JSON_MEDIA_TYPE),
                ("Accept", JSON_MEDIA_TYPE),
                ("X-App-Version", settings.app_version),
                ("X-Build-Number", settings.build_number),
                ("X-Platform", settings.platform),
                ("X-OS-Version", settings.os_version),
            ]
        )


def _checked_form_fields(payload: Any) -> list[tuple[str, str]]:
    try:
        return form_fields(payload)
    except (TypeError, ValueError) as exc:
        raise EncodingFailedError(exc) from exc


def _multipart_body(url: str, file: FilePart | None, payload: Any) -> tuple[bytes, str]:
    if file is None:
        raise EncodingFailedError(ValueError("multipart encoding requires a file part"))
    fields = _checked_form_fields(payload) if payload is not None else []
    # requests only renders the body here; nothing is sent.
    prepared = requests.Request(
        method="POST",
        url=url,
        files=[(file.field_name, (file.file_name, file.content, file.mime_type))],
        data=fields or None,
    ).prepare()
    return prepared.body, prepared.headers["Content-Type"]
