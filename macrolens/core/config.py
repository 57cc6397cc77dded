"""Application configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
import os

DEFAULT_API_VERSION = "v1"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0
DEFAULT_RESOURCE_TIMEOUT_SECONDS = 60.0
DEFAULT_APP_VERSION = "1.0.0"
DEFAULT_BUILD_NUMBER = "1"
DEFAULT_PLATFORM = "iOS"
DEFAULT_OS_VERSION = "17.0"
DEFAULT_LOG_LEVEL = "DEBUG"


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

    @property
    def origin(self) -> str:
        return _ORIGINS[self]


_ORIGINS: dict[Environment, str] = {
    Environment.DEVELOPMENT: "http://localhost:8000",
    Environment.STAGING: "https://macrolens-api-staging.up.railway.app",
    Environment.PRODUCTION: "https://macrolens-api.up.railway.app",
}


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    return float(raw)


def _get_environment(name: str, default: Environment) -> Environment:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return Environment(raw.strip().lower())
    except ValueError as exc:
        raise ValueError(f"Unknown environment `{raw}` in {name}") from exc


def redact_secret(secret: str | None) -> str:
    """Return a non-recoverable placeholder for sensitive values."""
    if not secret:
        return "<empty>"
    return "<redacted>"


@dataclass(frozen=True)
class AppSettings:
    """Runtime settings shared by the request pipeline."""

    environment: Environment = Environment.DEVELOPMENT
    api_version: str = DEFAULT_API_VERSION
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    resource_timeout_seconds: float = DEFAULT_RESOURCE_TIMEOUT_SECONDS
    app_version: str = DEFAULT_APP_VERSION
    build_number: str = DEFAULT_BUILD_NUMBER
    platform: str = DEFAULT_PLATFORM
    os_version: str = DEFAULT_OS_VERSION
    log_level: str = DEFAULT_LOG_LEVEL
    base_url_override: str | None = None

    def __post_init__(self) -> None:
        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        if self.resource_timeout_seconds <= 0:
            raise ValueError("resource_timeout_seconds must be positive")

    @property
    def base_url(self) -> str:
        """Origin for the selected environment, without the API prefix."""
        if self.base_url_override:
            return self.base_url_override.rstrip("/")
        return self.environment.origin

    @property
    def api_base_url(self) -> str:
        return f"{self.base_url}/api/{self.api_version}"

    @property
    def logging_enabled(self) -> bool:
        return self.environment is Environment.DEVELOPMENT

    def safe_for_logging(self) -> dict[str, str | float]:
        """Return settings safe for logs."""
        return {
            "environment": self.environment.value,
            "api_base_url": self.api_base_url,
            "request_timeout_seconds": self.request_timeout_seconds,
            "app_version": self.app_version,
            "build_number": self.build_number,
            "platform": self.platform,
            "os_version": self.os_version,
        }


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Load pipeline settings from the environment."""
    return AppSettings(
        environment=_get_environment("MACROLENS_ENV", Environment.DEVELOPMENT),
        api_version=os.getenv("MACROLENS_API_VERSION", DEFAULT_API_VERSION),
        request_timeout_seconds=_get_float_env(
            "MACROLENS_REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT_SECONDS
        ),
        resource_timeout_seconds=_get_float_env(
            "MACROLENS_RESOURCE_TIMEOUT_SECONDS", DEFAULT_RESOURCE_TIMEOUT_SECONDS
        ),
        app_version=os.getenv("MACROLENS_APP_VERSION", DEFAULT_APP_VERSION),
        build_number=os.getenv("MACROLENS_BUILD_NUMBER", DEFAULT_BUILD_NUMBER),
        platform=os.getenv("MACROLENS_PLATFORM", DEFAULT_PLATFORM),
        os_version=os.getenv("MACROLENS_OS_VERSION", DEFAULT_OS_VERSION),
        log_level=os.getenv("MACROLENS_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        base_url_override=os.getenv("MACROLENS_BASE_URL") or None,
    )
