"""Wire format: timestamp conventions, JSON and form body encoding, typed decoding."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from datetime import datetime
from datetime import timezone
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any
from urllib.parse import urlencode
from uuid import UUID

import json

from pydantic import BaseModel
from pydantic import TypeAdapter

from macrolens.schemas.base import TIMESTAMP_PARSER_CONTEXT_KEY

FIXED_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"


class TimestampFormatError(ValueError):
    """Raised when a wire timestamp does not match the active convention."""


def format_timestamp(value: datetime) -> str:
    """Render a datetime in the fixed wire format; naive values are taken as UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(FIXED_TIMESTAMP_FORMAT)


def parse_fixed_timestamp(value: str) -> datetime:
    try:
        parsed = datetime.strptime(value.strip(), FIXED_TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise TimestampFormatError(f"Timestamp `{value}` does not match {FIXED_TIMESTAMP_FORMAT}") from exc
    return parsed.replace(tzinfo=timezone.utc)


def parse_iso_timestamp(value: str) -> datetime:
    normalized = value.strip()
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise TimestampFormatError(f"Invalid ISO-8601 timestamp value: {value}") from exc

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class DecodingConvention:
    """How response bodies are turned into typed values."""

    name: str
    parse_timestamp: Callable[[str], datetime]

    @property
    def context(self) -> dict[str, Any]:
        return {TIMESTAMP_PARSER_CONTEXT_KEY: self.parse_timestamp}


FIXED_FORMAT = DecodingConvention(name="fixed", parse_timestamp=parse_fixed_timestamp)
ISO_8601 = DecodingConvention(name="iso8601", parse_timestamp=parse_iso_timestamp)


def _encode_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="python", by_alias=True)
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_body(payload: Any) -> bytes:
    """Serialize a payload to UTF-8 JSON bytes.

    Raises ``TypeError`` or ``ValueError`` when the payload has no JSON form.
    """
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="python", by_alias=True)
    return json.dumps(payload, default=_encode_default, allow_nan=False).encode("utf-8")


@lru_cache(maxsize=256)
def _type_adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def decode_body(target: Any, body: bytes, convention: DecodingConvention) -> Any:
    """Decode JSON bytes into ``target`` using the given convention.

    Raises ``ValueError`` (including ``json.JSONDecodeError`` and pydantic's
    ``ValidationError``) when the body does not fit.
    """
    payload = json.loads(body)
    return _type_adapter(target).validate_python(payload, context=convention.context)


def _form_value(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, (Mapping, BaseModel, list)):
        raise TypeError(f"Nested {type(value).__name__} values cannot be form encoded")
    return str(_encode_default(value))


def form_fields(payload: Any) -> list[tuple[str, str]]:
    """Flatten a mapping payload into form fields; sequences repeat their key.

    ``None`` values are skipped. Raises ``TypeError`` for nested values or
    non-mapping payloads.
    """
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="python", by_alias=True)
    if not isinstance(payload, Mapping):
        raise TypeError(f"Form payloads must be mappings, got {type(payload).__name__}")

    fields: list[tuple[str, str]] = []
    for key, value in payload.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            fields.extend((str(key), _form_value(item)) for item in value)
        else:
            fields.append((str(key), _form_value(value)))
    return fields


def encode_form_body(payload: Any) -> bytes:
    """Serialize a mapping payload as ``application/x-www-form-urlencoded``."""
    return urlencode(form_fields(payload)).encode("ascii")
