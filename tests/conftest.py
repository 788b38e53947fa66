"""Root conftest — shared test configuration."""

import pytest

from squirreldb.config import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are lru_cached; never let one test's env leak into another."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
