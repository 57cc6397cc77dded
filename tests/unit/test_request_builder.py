"""Unit tests for outbound request construction."""

from __future__ import annotations

from datetime import datetime
from datetime import timezone
import json

import pytest

from macrolens.core.config import AppSettings
from macrolens.core.errors import EncodingFailedError
from macrolens.core.errors import InvalidEndpointError
from macrolens.networking.endpoints import Endpoint
from macrolens.networking.endpoints import FoodLogOperation
from macrolens.networking.endpoints import FoodOperation
from macrolens.networking.endpoints import HTTPMethod
from macrolens.networking.request_builder import FilePart
from macrolens.networking.request_builder import ParameterEncoding
from macrolens.networking.request_builder import RequestBuilder
from macrolens.networking.request_builder import RequestOptions
from macrolens.schemas.base import WireModel


class _LogEntry(WireModel):
    food_name: str
    calories_kcal: float
    eaten_at: datetime


class _Micronutrients(WireModel):
    vitamin_b12: float
    omega3: float
    vitamin_d3_iu: int | None = None


def test_build_sets_url_verb_timeout_and_standard_headers(settings: AppSettings) -> None:
    request = RequestBuilder(settings).build(
        Endpoint.of(FoodLogOperation.DETAILS, log_id="42"),
        access_token="token-123",
    )

    assert request.url == "http://localhost:8000/api/v1/food/logs/42"
    assert request.method is HTTPMethod.GET
    assert request.timeout_seconds == 30.0
    assert request.body is None
    assert list(request.headers.items()) == [
        ("Content-Type", "application/json"),
        ("Accept", "application/json"),
        ("X-App-Version", "2.3.1"),
        ("X-Build-Number", "57"),
        ("X-Platform", "iOS"),
        ("X-OS-Version", "17.4"),
        ("Authorization", "Bearer token-123"),
    ]


def test_authorization_is_omitted_when_not_required(settings: AppSettings) -> None:
    request = RequestBuilder(settings).build(
        Endpoint.of(FoodOperation.POPULAR),
        RequestOptions(requires_authentication=False),
        access_token="token-123",
    )

    assert "Authorization" not in request.headers


def test_missing_token_passes_through_without_authorization(settings: AppSettings) -> None:
    request = RequestBuilder(settings).build(Endpoint.of(FoodOperation.POPULAR))

    assert "Authorization" not in request.headers


def test_custom_headers_override_defaults_case_insensitively(settings: AppSettings) -> None:
    request = RequestBuilder(settings).build(
        Endpoint.of(FoodOperation.SCAN),
        RequestOptions(headers={"accept": "image/*", "X-Custom-Header": "value"}, timeout_seconds=60.0),
        access_token="t",
    )

    assert request.headers["Accept"] == "image/*"
    assert request.headers["x-custom-header"] == "value"
    assert [key.lower() for key, _ in request.header_items].count("accept") == 1
    assert request.timeout_seconds == 60.0


def test_query_params_are_appended_for_reads(settings: AppSettings) -> None:
    request = RequestBuilder(settings).build(
        Endpoint.of(FoodOperation.SEARCH),
        RequestOptions(query_params={"query": "chicken", "limit": "20"}),
    )

    assert request.url == "http://localhost:8000/api/v1/food/search?query=chicken&limit=20"


def test_query_params_are_ignored_for_writes(settings: AppSettings) -> None:
    request = RequestBuilder(settings).build(
        Endpoint.of(FoodLogOperation.CREATE),
        RequestOptions(query_params={"query": "chicken"}),
    )

    assert request.url == "http://localhost:8000/api/v1/food/log"


def test_empty_query_params_leave_url_untouched(settings: AppSettings) -> None:
    request = RequestBuilder(settings).build(Endpoint.of(FoodOperation.SEARCH), RequestOptions(query_params={}))

    assert request.url == "http://localhost:8000/api/v1/food/search"


def test_raw_path_uses_given_method_and_gets_leading_slash(settings: AppSettings) -> None:
    request = RequestBuilder(settings).build("food/custom", method=HTTPMethod.PATCH)

    assert request.url == "http://localhost:8000/api/v1/food/custom"
    assert request.method is HTTPMethod.PATCH


def test_model_payload_is_encoded_with_snake_case_keys_and_fixed_timestamps(settings: AppSettings) -> None:
    entry = _LogEntry(
        food_name="Oats",
        calories_kcal=150.5,
        eaten_at=datetime(2026, 10, 16, 8, 30, 0, 120000, tzinfo=timezone.utc),
    )

    request = RequestBuilder(settings).build(Endpoint.of(FoodLogOperation.CREATE), RequestOptions(payload=entry))

    assert json.loads(request.body) == {
        "food_name": "Oats",
        "calories_kcal": 150.5,
        "eaten_at": "2026-10-16T08:30:00.120000",
    }


def test_mapping_payload_is_encoded_as_json(settings: AppSettings) -> None:
    request = RequestBuilder(settings).build(
        Endpoint.of(FoodLogOperation.CREATE),
        RequestOptions(payload={"email": "user@example.com", "servings": 2}),
    )

    assert json.loads(request.body) == {"email": "user@example.com", "servings": 2}


def test_unserializable_payload_fails_with_encoding_error(settings: AppSettings) -> None:
    with pytest.raises(EncodingFailedError) as exc_info:
        RequestBuilder(settings).build(
            Endpoint.of(FoodLogOperation.CREATE),
            RequestOptions(payload={"blob": object()}),
        )

    assert isinstance(exc_info.value.cause, TypeError)


def test_non_finite_numbers_fail_with_encoding_error(settings: AppSettings) -> None:
    with pytest.raises(EncodingFailedError):
        RequestBuilder(settings).build(
            Endpoint.of(FoodLogOperation.CREATE),
            RequestOptions(payload={"calories": float("nan")}),
        )


@pytest.mark.parametrize("base_url", ["localhost:8000", "ftp://files.example.com", "http://"])
def test_malformed_base_url_fails_with_invalid_endpoint(base_url: str) -> None:
    settings = AppSettings(base_url_override=base_url)

    with pytest.raises(InvalidEndpointError):
        RequestBuilder(settings).build(Endpoint.of(FoodOperation.POPULAR))


def test_outbound_request_converts_to_requests_request(settings: AppSettings) -> None:
    outbound = RequestBuilder(settings).build(
        Endpoint.of(FoodLogOperation.CREATE),
        RequestOptions(payload={"a": 1}),
        access_token="t",
    )

    converted = outbound.to_requests()

    assert converted.method == "POST"
    assert converted.url == outbound.url
    assert converted.headers["Authorization"] == "Bearer t"
    assert converted.data == outbound.body


def test_timeout_must_be_positive() -> None:
    with pytest.raises(ValueError):
        RequestOptions(timeout_seconds=0)


def test_field_names_with_digits_are_sent_verbatim(settings: AppSettings) -> None:
    request = RequestBuilder(settings).build(
        Endpoint.of(FoodOperation.CUSTOM),
        RequestOptions(payload=_Micronutrients(vitamin_b12=2.4, omega3=1.1, vitamin_d3_iu=400)),
    )

    assert json.loads(request.body) == {"vitamin_b12": 2.4, "omega3": 1.1, "vitamin_d3_iu": 400}


def test_form_encoding_writes_urlencoded_body_for_writes(settings: AppSettings) -> None:
    request = RequestBuilder(settings).build(
        Endpoint.of(FoodOperation.CUSTOM),
        RequestOptions(
            payload={"food_name": "Trail mix", "serving_sizes": [30, 60], "verified": False, "notes": None},
            encoding=ParameterEncoding.FORM,
        ),
    )

    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert request.body == b"food_name=Trail+mix&serving_sizes=30&serving_sizes=60&verified=false"
    assert "?" not in request.url


def test_form_encoding_moves_payload_into_query_for_reads(settings: AppSettings) -> None:
    request = RequestBuilder(settings).build(
        Endpoint.of(FoodOperation.SEARCH),
        RequestOptions(
            payload={"page": 2},
            query_params={"q": "rice"},
            encoding=ParameterEncoding.FORM,
        ),
    )

    assert request.url == "http://localhost:8000/api/v1/food/search?q=rice&page=2"
    assert request.body is None


def test_form_encoding_rejects_nested_values(settings: AppSettings) -> None:
    with pytest.raises(EncodingFailedError) as exc_info:
        RequestBuilder(settings).build(
            Endpoint.of(FoodOperation.CUSTOM),
            RequestOptions(payload={"macros": {"protein": 10}}, encoding=ParameterEncoding.FORM),
        )

    assert isinstance(exc_info.value.cause, TypeError)


def test_multipart_encoding_renders_file_and_fields(settings: AppSettings) -> None:
    request = RequestBuilder(settings).build(
        Endpoint.of(FoodOperation.SCAN),
        RequestOptions(
            payload={"meal_type": "lunch"},
            encoding=ParameterEncoding.MULTIPART,
            file=FilePart(content=b"\xff\xd8jpeg-bytes", file_name="plate.jpg"),
            headers={"X-Request-Id": "scan-1"},
        ),
        access_token="token-123",
    )

    content_type = request.headers["Content-Type"]
    assert content_type.startswith("multipart/form-data; boundary=")
    boundary = content_type.split("boundary=", 1)[1].encode("ascii")
    assert request.body.count(b"--" + boundary) == 3
    assert b'name="meal_type"\r\n\r\nlunch' in request.body
    assert b'name="file"; filename="plate.jpg"\r\nContent-Type: image/jpeg\r\n\r\n\xff\xd8jpeg-bytes' in request.body
    assert request.headers["Authorization"] == "Bearer token-123"
    assert request.headers["X-Request-Id"] == "scan-1"


def test_multipart_encoding_without_file_fails_with_encoding_error(settings: AppSettings) -> None:
    with pytest.raises(EncodingFailedError):
        RequestBuilder(settings).build(
            Endpoint.of(FoodOperation.SCAN),
            RequestOptions(encoding=ParameterEncoding.MULTIPART),
        )


def test_file_part_requires_multipart_encoding() -> None:
    with pytest.raises(ValueError):
        RequestOptions(file=FilePart(content=b"x", file_name="x.jpg"))
