"""Shared pytest fixtures for macrolens test suites."""

from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from macrolens.core.config import AppSettings  # noqa: E402
from macrolens.core.config import Environment  # noqa: E402


@pytest.fixture
def settings() -> AppSettings:
    """Development settings with fixed client metadata."""
    return AppSettings(
        environment=Environment.DEVELOPMENT,
        app_version="2.3.1",
        build_number="57",
        os_version="17.4",
    )
