"""Shared pydantic base for snake_case JSON wire payloads."""

from __future__ import annotations

from datetime import datetime
from datetime import timezone
from typing import Any
from typing import get_args

from pydantic import BaseModel
from pydantic import ValidationInfo
from pydantic import field_validator

TIMESTAMP_PARSER_CONTEXT_KEY = "parse_timestamp"


def _accepts_datetime(annotation: Any) -> bool:
    if annotation is datetime:
        return True
    return any(_accepts_datetime(arg) for arg in get_args(annotation))


class WireModel(BaseModel):
    """Base model for API payloads.

    Field names are the snake_case wire keys, with no alias mapping.
    Timestamp strings on ``datetime`` fields are parsed by the decoding
    convention passed in the validation context, when one is supplied.
    Datetimes are held timezone-aware; naive values are taken as UTC.
    """

    @field_validator("*", mode="before")
    @classmethod
    def _parse_wire_timestamps(cls, value: Any, info: ValidationInfo) -> Any:
        if not isinstance(value, str) or not info.context or info.field_name is None:
            return value
        parse_timestamp = info.context.get(TIMESTAMP_PARSER_CONTEXT_KEY)
        if parse_timestamp is None:
            return value
        field = cls.model_fields.get(info.field_name)
        if field is None or not _accepts_datetime(field.annotation):
            return value
        return parse_timestamp(value)

    @field_validator("*", mode="after")
    @classmethod
    def _assume_utc(cls, value: Any) -> Any:
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
