"""
Folds a stream of events into a final MessageResponse.

The accumulator is owned by exactly one stream and must see events in
arrival order. It enforces the event-ordering rules of the protocol:

- message_start comes first and only once
- content block indices never go backward
- a block receives deltas only between its start and its stop
- nothing but pings follows message_stop
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import pydantic
from pydantic import TypeAdapter

from anthropic_messages.errors import (
    ApiError,
    HttpError,
    IncompleteStreamError,
    ProtocolError,
    StreamDecodeError,
)
from anthropic_messages.telemetry import get_logger
from anthropic_messages.types import (
    ContentBlock,
    ContentBlockDeltaEvent,
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    ErrorEvent,
    InputJsonDelta,
    MessageDeltaEvent,
    MessageResponse,
    MessageStartEvent,
    MessageStopEvent,
    PingEvent,
    StopReason,
    StreamEvent,
    TextDelta,
    UnknownEvent,
    Usage,
)

logger = get_logger(__name__)

_content_block_adapter: TypeAdapter[Any] = TypeAdapter(ContentBlock)

# Block kinds with a typed model; deltas for any other kind are merged opaquely
_MODELED_BLOCK_KINDS = frozenset({"text", "image", "tool_use", "tool_result"})


@dataclass
class _BlockState:
    """In-progress content block."""

    index: int
    fields: dict[str, Any]
    json_parts: list[str] = field(default_factory=list)
    stopped: bool = False

    @property
    def kind(self) -> str:
        return self.fields.get("type", "")


class MessageAccumulator:
    """Accumulates stream events into a MessageResponse.

    Example:
        >>> acc = MessageAccumulator()
        >>> async for event in stream:
        ...     acc.apply(event)
        >>> message = acc.finalize()

    Once ``apply`` has raised, the accumulator is poisoned: later calls to
    ``apply`` or ``finalize`` raise the same error.
    """

    def __init__(self) -> None:
        self._shell: MessageResponse | None = None
        self._blocks: dict[int, _BlockState] = {}
        self._last_index = -1
        self._stop_reason: StopReason | None = None
        self._stop_sequence: str | None = None
        self._input_tokens = 0
        self._output_tokens = 0
        self._done = False
        self._failure: ApiError | None = None
        self._anomalies: list[str] = []

    @property
    def is_complete(self) -> bool:
        """True once message_stop has been applied."""
        return self._done

    @property
    def anomalies(self) -> list[str]:
        """Warnings recorded while folding (e.g. auto-closed blocks)."""
        return list(self._anomalies)

    @property
    def failure(self) -> ApiError | None:
        return self._failure

    def apply(self, event: StreamEvent) -> None:
        """Apply one event.

        Raises:
            ProtocolError: The event breaks the ordering rules
            StreamDecodeError: A tool-use block closed with invalid JSON input
            HttpError: The event is an in-stream error
        """
        if self._failure is not None:
            raise self._failure
        try:
            self._apply(event)
        except ApiError as e:
            self._failure = e
            raise

    def _apply(self, event: StreamEvent) -> None:
        if isinstance(event, (PingEvent, UnknownEvent)):
            return

        if isinstance(event, ErrorEvent):
            raise HttpError.from_body(None, event.model_dump(mode="json"))

        if self._done:
            raise ProtocolError(f"'{event.type}' after message_stop", event=event.type)

        if isinstance(event, MessageStartEvent):
            if self._shell is not None:
                raise ProtocolError("Duplicate message_start", event=event.type)
            self._shell = event.message
            self._stop_reason = event.message.stop_reason
            self._stop_sequence = event.message.stop_sequence
            self._input_tokens = event.message.usage.input_tokens
            self._output_tokens = event.message.usage.output_tokens
            return

        if self._shell is None:
            raise ProtocolError(f"'{event.type}' before message_start", event=event.type)

        if isinstance(event, ContentBlockStartEvent):
            self._start_block(event)
        elif isinstance(event, ContentBlockDeltaEvent):
            self._apply_delta(event)
        elif isinstance(event, ContentBlockStopEvent):
            state = self._blocks.get(event.index)
            if state is None:
                raise ProtocolError(
                    "content_block_stop for a block that was never started",
                    index=event.index,
                    event=event.type,
                )
            if state.stopped:
                raise ProtocolError(
                    "Duplicate content_block_stop", index=event.index, event=event.type
                )
            self._close_block(state)
        elif isinstance(event, MessageDeltaEvent):
            changed = event.delta.model_fields_set
            if "stop_reason" in changed:
                self._stop_reason = event.delta.stop_reason
            if "stop_sequence" in changed:
                self._stop_sequence = event.delta.stop_sequence
            if event.usage is not None:
                # Usage in message_delta is cumulative
                self._output_tokens = event.usage.output_tokens
                if event.usage.input_tokens is not None:
                    self._input_tokens = event.usage.input_tokens
        elif isinstance(event, MessageStopEvent):
            self._auto_close("message_stop")
            self._done = True

    def _start_block(self, event: ContentBlockStartEvent) -> None:
        index = event.index
        if index < 0 or index < self._last_index:
            raise ProtocolError(
                f"content_block_start index {index} after index {self._last_index}",
                index=index,
                event=event.type,
            )

        existing = self._blocks.get(index)
        if existing is not None:
            if not existing.stopped:
                raise ProtocolError(
                    "content_block_start for a block that is still open",
                    index=index,
                    event=event.type,
                )
            self._record_anomaly(f"Block {index} restarted after stop; replacing it", index)

        self._blocks[index] = _BlockState(
            index=index,
            fields=event.content_block.model_dump(mode="json", by_alias=True),
        )
        self._last_index = index

    def _apply_delta(self, event: ContentBlockDeltaEvent) -> None:
        state = self._blocks.get(event.index)
        if state is None:
            raise ProtocolError(
                "content_block_delta for a block that was never started",
                index=event.index,
                event=event.type,
            )
        if state.stopped:
            raise ProtocolError(
                "content_block_delta after content_block_stop",
                index=event.index,
                event=event.type,
            )

        delta = event.delta
        modeled = state.kind in _MODELED_BLOCK_KINDS
        if isinstance(delta, TextDelta):
            if modeled and state.kind != "text":
                raise ProtocolError(
                    f"text_delta for a '{state.kind}' block",
                    index=event.index,
                    event=event.type,
                )
            state.fields["text"] = state.fields.get("text", "") + delta.text
        elif isinstance(delta, InputJsonDelta):
            if modeled and state.kind != "tool_use":
                raise ProtocolError(
                    f"input_json_delta for a '{state.kind}' block",
                    index=event.index,
                    event=event.type,
                )
            state.json_parts.append(delta.partial_json)
        else:
            for key, value in (delta.model_extra or {}).items():
                if not isinstance(value, str):
                    continue
                current = state.fields.get(key)
                if current is None:
                    state.fields[key] = value
                elif isinstance(current, str):
                    state.fields[key] = current + value

    def _close_block(self, state: _BlockState, *, lenient: bool = False) -> None:
        state.stopped = True
        if not state.json_parts:
            return

        raw = "".join(state.json_parts)
        try:
            parsed = json.loads(raw) if raw.strip() else {}
        except ValueError as e:
            if lenient:
                self._record_anomaly(f"Block {state.index} has incomplete tool input", state.index)
                return
            raise StreamDecodeError(
                f"Tool input for block {state.index} is not valid JSON: {e}",
                event="content_block_stop",
                data=raw,
                cause=e,
            ) from e

        if not isinstance(parsed, dict):
            if lenient:
                self._record_anomaly(f"Block {state.index} tool input is not an object", state.index)
                return
            raise StreamDecodeError(
                f"Tool input for block {state.index} is not a JSON object",
                event="content_block_stop",
                data=raw,
            )
        state.fields["input"] = parsed

    def _auto_close(self, reason: str, *, lenient: bool = False) -> None:
        for index in sorted(self._blocks):
            state = self._blocks[index]
            if not state.stopped:
                self._record_anomaly(f"Block {index} auto-closed at {reason}", index)
                self._close_block(state, lenient=lenient)

    def _record_anomaly(self, message: str, index: int) -> None:
        logger.warning(message, index=index)
        self._anomalies.append(message)

    def finalize(self, best_effort: bool = False) -> MessageResponse:
        """Assemble the final message.

        Args:
            best_effort: Accept a stream that ended without message_stop;
                open blocks are closed and recorded as anomalies

        Raises:
            IncompleteStreamError: The stream has not reached message_stop
                (or never started) and ``best_effort`` is not set
        """
        if self._failure is not None:
            raise self._failure
        if self._shell is None:
            raise IncompleteStreamError("Stream ended before message_start")
        if not self._done:
            if not best_effort:
                raise IncompleteStreamError("Stream ended before message_stop")
            self._auto_close("end of stream", lenient=True)

        try:
            content = [
                _content_block_adapter.validate_python(self._blocks[index].fields)
                for index in sorted(self._blocks)
            ]
        except pydantic.ValidationError as e:
            raise StreamDecodeError(
                f"Accumulated block does not match the content schema: {e.error_count()} error(s)",
                cause=e,
            ) from e

        return self._shell.model_copy(
            update={
                "content": content,
                "stop_reason": self._stop_reason,
                "stop_sequence": self._stop_sequence,
                "usage": Usage(
                    input_tokens=self._input_tokens,
                    output_tokens=self._output_tokens,
                ),
            }
        )
