"""
Client layer - configuration, request building and the call facade.
"""

from anthropic_messages.client.builder import build_payload
from anthropic_messages.client.config import (
    DEFAULT_BASE_URL,
    AnthropicVersion,
    ApiVersion,
    ClientConfig,
)
from anthropic_messages.client.core import AnthropicClient
from anthropic_messages.client.state import CallState
from anthropic_messages.client.stream import MessageStream, MessageStreamManager

__all__ = [
    "DEFAULT_BASE_URL",
    "AnthropicClient",
    "AnthropicVersion",
    "ApiVersion",
    "CallState",
    "ClientConfig",
    "MessageStream",
    "MessageStreamManager",
    "build_payload",
]
