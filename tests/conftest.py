"""Shared pytest fixtures for the error envelope test suites."""

from collections.abc import Generator
from datetime import datetime
from datetime import timezone
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

FIXED_INSTANT = datetime(2024, 3, 5, 14, 7, 9, 123456, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """Drop cached settings so environment overrides apply per test."""
    from rest_errors.core.config import get_error_settings
    from rest_errors.core.redaction import get_redactor

    get_error_settings.cache_clear()
    get_redactor.cache_clear()
    yield
    get_error_settings.cache_clear()
    get_redactor.cache_clear()


@pytest.fixture
def fixed_clock():
    """Clock returning the same instant on every call."""
    return lambda: FIXED_INSTANT


@pytest.fixture
def app_client() -> Generator:
    """Provide a test client for the packaged application."""
    from fastapi.testclient import TestClient

    from rest_errors.main import app

    with TestClient(app) as test_client:
        yield test_client
