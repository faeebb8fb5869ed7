"""Shared test fixtures for the answer client.

Provides common fixtures used across the unit tests.
"""

import pytest
from pydantic import SecretStr

from answer_client.settings import Settings

# =============================================================================
# SETTINGS
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Provide test settings with safe defaults."""
    return Settings(
        debug=True,
        answer_base_url="https://answer.test.local",
        answer_api_key=SecretStr("test-api-key"),
        search_endpoint="https://search.test.local/v1/indexes/docs",
        user_id="user-test",
    )


@pytest.fixture
def mock_settings(test_settings: Settings, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Mock get_settings() to return test settings."""
    from answer_client import session, settings

    monkeypatch.setattr(settings, "get_settings", lambda: test_settings)
    monkeypatch.setattr(session, "get_settings", lambda: test_settings)
    return test_settings
