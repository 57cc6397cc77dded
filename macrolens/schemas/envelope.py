"""Generic success/data/error response envelope."""

from __future__ import annotations

from typing import Generic
from typing import TypeVar

from macrolens.schemas.base import WireModel

T = TypeVar("T")


class APIResponse(WireModel, Generic[T]):
    """Wrapper used by endpoints that report success alongside the payload."""

    success: bool
    data: T | None = None
    message: str | None = None
    error: str | None = None

    def failure_reason(self, default: str) -> str:
        """Human-readable reason for an unsuccessful envelope, `error` first."""
        return self.error or self.message or default
