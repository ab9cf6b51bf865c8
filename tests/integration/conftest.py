"""
Integration test helper utilities.

Builders for Messages API bodies and SSE streams, exposed as fixtures.
"""

from __future__ import annotations

import json
from typing import Any

import pytest


def mock_message_response(
    content: str = "Hello from Anthropic!",
    model: str = "claude-3-5-sonnet-20240620",
    stop_reason: str = "end_turn",
    usage: dict[str, int] | None = None,
) -> dict[str, Any]:
    """Create a mock non-streaming Messages response."""
    return {
        "id": "msg_123",
        "type": "message",
        "role": "assistant",
        "model": model,
        "content": [{"type": "text", "text": content}],
        "stop_reason": stop_reason,
        "stop_sequence": None,
        "usage": usage or {"input_tokens": 10, "output_tokens": 5},
    }


def mock_streaming_events(
    content: str,
    model: str = "claude-3-5-sonnet-20240620",
) -> list[dict[str, Any]]:
    """Create the event sequence of a streamed text reply, one delta per character."""
    events: list[dict[str, Any]] = [
        {
            "type": "message_start",
            "message": {
                "id": "msg_123",
                "type": "message",
                "role": "assistant",
                "content": [],
                "model": model,
                "stop_reason": None,
                "stop_sequence": None,
                "usage": {"input_tokens": 10, "output_tokens": 1},
            },
        },
        {
            "type": "content_block_start",
            "index": 0,
            "content_block": {"type": "text", "text": ""},
        },
        {"type": "ping"},
    ]

    for char in content:
        events.append({
            "type": "content_block_delta",
            "index": 0,
            "delta": {"type": "text_delta", "text": char},
        })

    events.append({"type": "content_block_stop", "index": 0})
    events.append({
        "type": "message_delta",
        "delta": {"stop_reason": "end_turn", "stop_sequence": None},
        "usage": {"output_tokens": len(content)},
    })
    events.append({"type": "message_stop"})
    return events


def encode_sse(events: list[dict[str, Any]]) -> bytes:
    """Frame events as an SSE body, naming each frame after its type."""
    frames = [f"event: {event['type']}\ndata: {json.dumps(event)}\n\n" for event in events]
    return "".join(frames).encode("utf-8")


@pytest.fixture
def message_body():
    return mock_message_response


@pytest.fixture
def stream_events():
    return mock_streaming_events


@pytest.fixture
def sse_body():
    return encode_sse
