"""
Maps SSE frames onto typed stream events.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pydantic

from anthropic_messages.errors import StreamDecodeError
from anthropic_messages.telemetry import get_logger
from anthropic_messages.types import EVENT_TYPES, StreamEvent, UnknownEvent

if TYPE_CHECKING:
    from anthropic_messages.pipeline.decode import ServerSentEvent

logger = get_logger(__name__)


def _event_name(sse: ServerSentEvent, payload: Any) -> str:
    # Frames without an event: line fall back to the payload's own type tag
    if sse.event and sse.event != "message":
        return sse.event
    if isinstance(payload, dict) and isinstance(payload.get("type"), str):
        return payload["type"]
    return sse.event


def parse_stream_event(sse: ServerSentEvent) -> StreamEvent:
    """Decode one SSE frame.

    Unknown event names become UnknownEvent carrying the parsed payload (or
    the raw text when it is not JSON). A recognized name whose payload is
    not valid JSON or does not match the event schema raises.

    Raises:
        StreamDecodeError: For a malformed frame of a recognized event type
    """
    try:
        payload: Any = json.loads(sse.data)
        parse_error: ValueError | None = None
    except ValueError as e:
        payload = None
        parse_error = e

    name = _event_name(sse, payload)
    model = EVENT_TYPES.get(name)

    if model is None:
        logger.debug("Unknown stream event", event=name)
        return UnknownEvent(event=name, data=sse.data if parse_error else payload)

    if parse_error is not None:
        raise StreamDecodeError(
            f"Invalid JSON in '{name}' event: {parse_error}",
            event=name,
            data=sse.data,
            cause=parse_error,
        ) from parse_error

    try:
        return model.model_validate(payload)  # type: ignore[return-value]
    except pydantic.ValidationError as e:
        raise StreamDecodeError(
            f"Malformed '{name}' event: {e.error_count()} error(s)",
            event=name,
            data=sse.data,
            cause=e,
        ) from e
