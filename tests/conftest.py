"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit tests.
"""

import pytest

from thinktank.config import Settings


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.MAX_ATTEMPTS = 5
    """
    return Settings(
        # === Application ===
        APP_NAME="thinktank (Test)",
        APP_VERSION="0.1.0",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === OpenRouter ===
        OPENROUTER_API_KEY="test-key",
        OPENROUTER_BASE_URL="https://openrouter.test/api/v1",
        LLM_TIMEOUT=30,

        # === Generation ===
        LLM_TEMPERATURE=0.7,
        LLM_MAX_TOKENS=None,

        # === Retry & Backoff ===
        MAX_ATTEMPTS=3,
        NETWORK_RETRY_WAIT_SECONDS=30.0,
        RATE_LIMIT_RETRY_WAIT_SECONDS=60.0,
        SERVER_RETRY_WAIT_SECONDS=15.0,
    )
