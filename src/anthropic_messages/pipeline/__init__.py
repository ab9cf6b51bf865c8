"""
Pipeline layer - SSE framing, event mapping, accumulation and response decoding.

Streaming flow:
    bytes -> SSEDecoder -> ServerSentEvent -> parse_stream_event -> StreamEvent
          -> MessageAccumulator -> MessageResponse
"""

from anthropic_messages.pipeline.accumulate import MessageAccumulator
from anthropic_messages.pipeline.decode import ServerSentEvent, SSEDecoder
from anthropic_messages.pipeline.event_map import parse_stream_event
from anthropic_messages.pipeline.response import (
    decode_message_response,
    error_from_response,
)

__all__ = [
    "MessageAccumulator",
    "SSEDecoder",
    "ServerSentEvent",
    "decode_message_response",
    "error_from_response",
    "parse_stream_event",
]
