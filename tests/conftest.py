"""Root pytest fixtures for anthropic-messages tests."""

from __future__ import annotations

import pytest

from anthropic_messages.client import ClientConfig
from anthropic_messages.resilience import RetryConfig
from anthropic_messages.types import Message, MessageRequest

TEST_API_KEY = "sk-ant-test-0123456789"
MESSAGES_URL = "https://api.anthropic.com/v1/messages"


@pytest.fixture
def messages_url() -> str:
    return MESSAGES_URL


@pytest.fixture
def config() -> ClientConfig:
    """Client config with zero-delay retries."""
    return ClientConfig(api_key=TEST_API_KEY, retry=RetryConfig.immediate())


@pytest.fixture
def simple_request() -> MessageRequest:
    """A minimal valid request."""
    return MessageRequest(
        model="claude-3-5-sonnet-20240620",
        max_tokens=64,
        messages=[Message.user("Hello")],
    )


@pytest.fixture
def sleeps() -> list[float]:
    """Backoff delays recorded by ``fake_sleep``."""
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]):
    """Sleep replacement that records the delay and returns at once."""

    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep
