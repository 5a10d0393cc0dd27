"""Shared fixtures for the chainmeta unit tests."""

from __future__ import annotations

import pytest

from chainmeta.settings.config import get_settings


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
