"""Unit test fixtures (mocks, stubs and timers).

Provides mock objects and deterministic wait primitives for testing the
retry processor without a provider or real elapsed time.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest

from thinktank.llm.api_service import APIService
from thinktank.llm.base_client import BaseLLMClient
from thinktank.models.llm_models import ProviderResult
from thinktank.retry.processor import ModelProcessor


class RecordingTimer:
    """Timer that fires immediately and remembers every requested wait."""

    def __init__(self):
        self.waits: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.waits.append(seconds)


@pytest.fixture
def instant_timer():
    """Timer that fires immediately, replacing asyncio.sleep in retry tests."""
    async def _instant(seconds: float) -> None:
        return None

    return _instant


@pytest.fixture
def recording_timer() -> RecordingTimer:
    return RecordingTimer()


@pytest.fixture
def never_firing_timer():
    """Timer that never completes on its own."""
    async def _never(seconds: float) -> None:
        await asyncio.Event().wait()

    return _never


@pytest.fixture
def mock_llm_client():
    """Mock provider client whose generate succeeds with 'review text'."""
    mock = AsyncMock(spec=BaseLLMClient)
    mock.provider_name = "test"
    mock.generate = AsyncMock(return_value=ProviderResult(
        content="review text",
        model="test-model",
        finish_reason="stop",
        prompt_tokens=100,
        completion_tokens=50,
        latency_ms=10,
    ))
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def mock_api_service(mock_llm_client):
    """Mock APIService returning mock_llm_client and passing content through."""
    mock = MagicMock(spec=APIService)
    mock.init_llm_client = Mock(return_value=mock_llm_client)
    mock.process_llm_response = Mock(side_effect=lambda result: result.content)
    return mock


@pytest.fixture
def mock_audit_logger():
    mock = MagicMock()
    mock.log_op = Mock(return_value=None)
    return mock


@pytest.fixture
def create_processor(mock_api_service, mock_audit_logger, test_settings, instant_timer):
    """Factory fixture to build a ModelProcessor wired to the mocks.

    Usage:
        def test_something(create_processor, recording_timer):
            processor = create_processor(timer=recording_timer)
    """
    def _create(timer=None, **kwargs) -> ModelProcessor:
        return ModelProcessor(
            mock_api_service,
            mock_audit_logger,
            test_settings,
            timer=timer or instant_timer,
            **kwargs,
        )

    return _create
