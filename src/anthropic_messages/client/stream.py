"""
Streaming response handle.

A MessageStream owns one open HTTP response. It is single-pass: events are
decoded lazily as the caller pulls them, and the connection is released
exactly once, on completion, on error, or when the caller stops early.

Example:
    >>> async with client.stream_message(request) as stream:
    ...     async for text in stream.text_stream():
    ...         print(text, end="")
    ...     message = await stream.get_final_message()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from anthropic_messages.client.state import CallState, log_transition
from anthropic_messages.errors import ApiError, HttpError, TransportError
from anthropic_messages.pipeline import MessageAccumulator, SSEDecoder, parse_stream_event
from anthropic_messages.types import (
    ContentBlockDeltaEvent,
    ErrorEvent,
    MessageResponse,
    MessageStopEvent,
    StreamEvent,
    TextDelta,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable


class MessageStream:
    """Async iterator over the typed events of one streaming call.

    Every event is also folded into an internal MessageAccumulator. Ordering
    violations found while folding do not interrupt iteration; they are
    raised by ``get_final_message()``.

    A StreamDecodeError raised for one malformed frame leaves the stream
    usable; pulling again continues with the next frame. An in-stream error
    event is raised as HttpError and ends the stream. The stream also ends,
    and releases its connection, as soon as message_stop is delivered.
    """

    def __init__(self, response: httpx.Response, *, call_id: str = "") -> None:
        self._response = response
        self._call_id = call_id
        self._frames = SSEDecoder().decode(response.aiter_bytes())
        self._accumulator = MessageAccumulator()
        self._fold_error: ApiError | None = None
        self._exhausted = False
        self._closed = False
        self._event_count = 0

    @property
    def response(self) -> httpx.Response:
        return self._response

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def accumulator(self) -> MessageAccumulator:
        return self._accumulator

    def __aiter__(self) -> MessageStream:
        return self

    async def __anext__(self) -> StreamEvent:
        if self._closed or self._exhausted:
            raise StopAsyncIteration

        try:
            sse = await self._frames.__anext__()
        except StopAsyncIteration:
            self._exhausted = True
            await self.aclose()
            raise
        except httpx.HTTPError as e:
            await self.aclose()
            raise TransportError(
                f"Stream interrupted: {e}",
                url=str(self._response.url),
                cause=e,
                is_timeout=isinstance(e, httpx.TimeoutException),
            ) from e

        event = parse_stream_event(sse)
        self._event_count += 1

        if isinstance(event, ErrorEvent):
            error = HttpError.from_body(None, event.model_dump(mode="json"))
            if self._fold_error is None:
                self._fold_error = error
            await self.aclose()
            raise error

        if self._fold_error is None:
            try:
                self._accumulator.apply(event)
            except ApiError as e:
                self._fold_error = e

        if isinstance(event, MessageStopEvent):
            self._exhausted = True
            await self.aclose()

        return event

    async def text_stream(self) -> AsyncIterator[str]:
        """Yield only the text of text deltas."""
        async for event in self:
            if isinstance(event, ContentBlockDeltaEvent) and isinstance(event.delta, TextDelta):
                yield event.delta.text

    async def get_final_message(self) -> MessageResponse:
        """Drain the remaining events and return the assembled message.

        Raises:
            ProtocolError: The stream broke the event-ordering rules
            IncompleteStreamError: The stream ended before message_stop
        """
        async for _ in self:
            pass
        if self._fold_error is not None:
            raise self._fold_error
        return self._accumulator.finalize()

    async def get_final_text(self) -> str:
        """Drain the stream and return the concatenated text content."""
        message = await self.get_final_message()
        return message.text

    async def aclose(self) -> None:
        """Release the connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._frames.aclose()
        finally:
            await self._response.aclose()
            self._log_close()

    def _log_close(self) -> None:
        if self._fold_error is not None:
            log_transition(
                self._call_id,
                CallState.FAILED,
                events=self._event_count,
                error=self._fold_error.kind.value,
            )
        elif self._accumulator.is_complete:
            log_transition(self._call_id, CallState.DONE, events=self._event_count)
        else:
            log_transition(
                self._call_id,
                CallState.FAILED,
                events=self._event_count,
                reason="closed before message_stop",
            )

    async def __aenter__(self) -> MessageStream:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()


class MessageStreamManager:
    """Lazy handle returned by ``stream_message``.

    Nothing is sent until the manager is entered with ``async with`` (which
    yields a MessageStream) or iterated directly with ``async for``.
    Leaving the ``async with`` block closes the stream.
    """

    def __init__(self, opener: Callable[[], Awaitable[MessageStream]]) -> None:
        self._opener = opener
        self._stream: MessageStream | None = None
        self._entered = False

    async def __aenter__(self) -> MessageStream:
        if self._entered:
            raise RuntimeError("A stream can only be consumed once")
        self._entered = True
        self._stream = await self._opener()
        return self._stream

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._stream is not None:
            await self._stream.aclose()

    def __aiter__(self) -> AsyncIterator[StreamEvent]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[StreamEvent]:
        async with self as stream:
            async for event in stream:
                yield event
