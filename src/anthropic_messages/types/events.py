"""Streaming events for the Messages endpoint.

Each server-sent event maps onto one of the models below, selected by the
SSE ``event:`` name. Names this library does not know become UnknownEvent.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Tag, field_validator

from anthropic_messages.types.message import ContentBlock
from anthropic_messages.types.response import (
    MessageResponse,
    StopReason,
    _coerce_stop_reason,
)


class TextDelta(BaseModel):
    """Text fragment appended to a text block."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text_delta"] = "text_delta"
    text: str


class InputJsonDelta(BaseModel):
    """Fragment of a tool-use block's JSON input."""

    model_config = ConfigDict(frozen=True)

    type: Literal["input_json_delta"] = "input_json_delta"
    partial_json: str


class UnknownDelta(BaseModel):
    """A delta kind this library does not model; fields kept as received."""

    model_config = ConfigDict(extra="allow", frozen=True)

    type: str


_KNOWN_DELTA_TYPES = frozenset({"text_delta", "input_json_delta"})


def _delta_tag(value: Any) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return kind if kind in _KNOWN_DELTA_TYPES else "unknown"


BlockDelta = Annotated[
    Annotated[TextDelta, Tag("text_delta")]
    | Annotated[InputJsonDelta, Tag("input_json_delta")]
    | Annotated[UnknownDelta, Tag("unknown")],
    Discriminator(_delta_tag),
]


class MessageStartEvent(BaseModel):
    """Opens the stream with the message shell (id, model, role, usage)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["message_start"] = "message_start"
    message: MessageResponse


class ContentBlockStartEvent(BaseModel):
    """Opens a content block at ``index``."""

    model_config = ConfigDict(frozen=True)

    type: Literal["content_block_start"] = "content_block_start"
    index: int
    content_block: ContentBlock


class ContentBlockDeltaEvent(BaseModel):
    """Appends a fragment to the open block at ``index``."""

    model_config = ConfigDict(frozen=True)

    type: Literal["content_block_delta"] = "content_block_delta"
    index: int
    delta: BlockDelta


class ContentBlockStopEvent(BaseModel):
    """Closes the block at ``index``."""

    model_config = ConfigDict(frozen=True)

    type: Literal["content_block_stop"] = "content_block_stop"
    index: int


class MessageDeltaBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    stop_reason: StopReason | None = None
    stop_sequence: str | None = None

    @field_validator("stop_reason", mode="before")
    @classmethod
    def _normalize_stop_reason(cls, value: Any) -> Any:
        return _coerce_stop_reason(value)


class MessageDeltaUsage(BaseModel):
    """Cumulative usage carried by message_delta."""

    model_config = ConfigDict(frozen=True)

    output_tokens: int
    input_tokens: int | None = None


class MessageDeltaEvent(BaseModel):
    """Top-level message changes: stop reason and usage."""

    model_config = ConfigDict(frozen=True)

    type: Literal["message_delta"] = "message_delta"
    delta: MessageDeltaBody
    usage: MessageDeltaUsage | None = None


class MessageStopEvent(BaseModel):
    """Terminal event of a successful stream."""

    model_config = ConfigDict(frozen=True)

    type: Literal["message_stop"] = "message_stop"


class PingEvent(BaseModel):
    """Keepalive."""

    model_config = ConfigDict(frozen=True)

    type: Literal["ping"] = "ping"


class ErrorDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    message: str = ""


class ErrorEvent(BaseModel):
    """Service error delivered inside the stream."""

    model_config = ConfigDict(frozen=True)

    type: Literal["error"] = "error"
    error: ErrorDetail


class UnknownEvent(BaseModel):
    """An event name this library does not model.

    Attributes:
        event: The SSE event name
        data: Parsed JSON payload, or the raw string when it is not JSON
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["unknown"] = "unknown"
    event: str
    data: Any = None


StreamEvent = (
    MessageStartEvent
    | ContentBlockStartEvent
    | ContentBlockDeltaEvent
    | ContentBlockStopEvent
    | MessageDeltaEvent
    | MessageStopEvent
    | PingEvent
    | ErrorEvent
    | UnknownEvent
)

EVENT_TYPES: dict[str, type[BaseModel]] = {
    "message_start": MessageStartEvent,
    "content_block_start": ContentBlockStartEvent,
    "content_block_delta": ContentBlockDeltaEvent,
    "content_block_stop": ContentBlockStopEvent,
    "message_delta": MessageDeltaEvent,
    "message_stop": MessageStopEvent,
    "ping": PingEvent,
    "error": ErrorEvent,
}
"""Recognized SSE event names and the model each one decodes into."""
