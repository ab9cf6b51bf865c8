"""anthropic-messages: async client for the Anthropic Messages API.

Builds typed requests, sends them with retry and backoff, and returns either
a complete MessageResponse or a lazy stream of typed events folded into one.
"""

from __future__ import annotations

from anthropic_messages._features import HAS_HTTP2, HAS_KEYRING, require_extra
from anthropic_messages.client import (
    AnthropicClient,
    AnthropicVersion,
    ApiVersion,
    ClientConfig,
    MessageStream,
    MessageStreamManager,
    build_payload,
)
from anthropic_messages.errors import (
    ApiError,
    DecodeError,
    ErrorKind,
    HttpError,
    IncompleteStreamError,
    ProtocolError,
    RetriesExhaustedError,
    ServiceErrorType,
    StreamDecodeError,
    TransportError,
    ValidationError,
)
from anthropic_messages.pipeline import MessageAccumulator
from anthropic_messages.resilience import JitterStrategy, RetryConfig
from anthropic_messages.types import (
    ContentBlock,
    ImageBlock,
    Message,
    MessageRequest,
    MessageResponse,
    Role,
    StopReason,
    StreamEvent,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    UnknownBlock,
    Usage,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "AnthropicClient",
    "AnthropicVersion",
    "ApiVersion",
    "ClientConfig",
    "MessageStream",
    "MessageStreamManager",
    "build_payload",
    # Feature flags
    "HAS_HTTP2",
    "HAS_KEYRING",
    "require_extra",
    # Errors
    "ApiError",
    "DecodeError",
    "ErrorKind",
    "HttpError",
    "IncompleteStreamError",
    "ProtocolError",
    "RetriesExhaustedError",
    "ServiceErrorType",
    "StreamDecodeError",
    "TransportError",
    "ValidationError",
    # Streaming
    "MessageAccumulator",
    # Retry
    "JitterStrategy",
    "RetryConfig",
    # Types
    "ContentBlock",
    "ImageBlock",
    "Message",
    "MessageRequest",
    "MessageResponse",
    "Role",
    "StopReason",
    "StreamEvent",
    "TextBlock",
    "ToolResultBlock",
    "ToolUseBlock",
    "UnknownBlock",
    "Usage",
    # Version
    "__version__",
]
