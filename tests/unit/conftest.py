"""Unit-test conftest — settings isolation.

Clears the cached ``get_settings()`` instance around every unit test so
environment variables set by one test (or by the developer's shell and
``.env``) never leak into another.
"""

from __future__ import annotations

import pytest

from answer_client.settings import get_settings


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
