"""
Server-Sent Events framing.

Parses the ``text/event-stream`` format:
```
event: content_block_delta
data: {"type": "content_block_delta", "index": 0, ...}

```
Lines may end in ``\\r\\n``, ``\\r`` or ``\\n``; a blank line dispatches the
pending event. Chunk boundaries may fall anywhere, including inside a UTF-8
sequence or between ``\\r`` and ``\\n``.
"""

from __future__ import annotations

import codecs
import json
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

_LINE_END = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class ServerSentEvent:
    """A single dispatched SSE frame.

    Attributes:
        event: Event name (``"message"`` when the frame has no ``event:`` line)
        data: Data lines joined with ``\\n``
        id: Last event id seen on the stream, if any
        retry: Reconnection time in milliseconds, if the frame set one
    """

    event: str = "message"
    data: str = ""
    id: str | None = None
    retry: int | None = None

    def json(self) -> Any:
        """Parse ``data`` as JSON."""
        return json.loads(self.data)


class SSEDecoder:
    """Incremental SSE decoder.

    Feed raw byte chunks in arrival order; complete frames come out as
    ServerSentEvent values. One decoder serves one stream.

    Example:
        >>> decoder = SSEDecoder()
        >>> decoder.feed(b'event: ping\\ndata: {"type": "ping"}\\n\\n')
        [ServerSentEvent(event='ping', data='{"type": "ping"}', id=None, retry=None)]
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._skip_lf = False
        self._started = False

        self._event: str | None = None
        self._data: list[str] = []
        self._last_id: str | None = None
        self._retry: int | None = None

    def feed(self, chunk: bytes) -> list[ServerSentEvent]:
        """Consume a chunk and return the frames it completed."""
        return self._feed_text(self._decoder.decode(chunk))

    def flush(self) -> list[ServerSentEvent]:
        """Signal end of stream.

        A trailing line without a terminator is processed, and a pending
        frame without the closing blank line is still dispatched.
        """
        events = self._feed_text(self._decoder.decode(b"", final=True))
        if self._buffer:
            event = self._process_line(self._buffer)
            self._buffer = ""
            if event is not None:
                events.append(event)
        event = self._dispatch()
        if event is not None:
            events.append(event)
        return events

    async def decode(self, byte_stream: AsyncIterator[bytes]) -> AsyncIterator[ServerSentEvent]:
        """Decode an async byte stream into frames.

        Args:
            byte_stream: Async iterator of raw bytes

        Yields:
            Dispatched frames, in order
        """
        async for chunk in byte_stream:
            for event in self.feed(chunk):
                yield event
        for event in self.flush():
            yield event

    def _feed_text(self, text: str) -> list[ServerSentEvent]:
        if not text:
            return []

        if not self._started:
            self._started = True
            if text.startswith("\ufeff"):
                text = text[1:]

        if self._skip_lf:
            self._skip_lf = False
            if text.startswith("\n"):
                text = text[1:]

        buffer = self._buffer + text
        lines = _LINE_END.split(buffer)
        self._buffer = lines.pop()
        # A trailing CR may be the first half of a CRLF split across chunks
        self._skip_lf = buffer.endswith("\r")

        events = []
        for line in lines:
            event = self._process_line(line)
            if event is not None:
                events.append(event)
        return events

    def _process_line(self, line: str) -> ServerSentEvent | None:
        if not line:
            return self._dispatch()

        if line.startswith(":"):
            return None

        name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if name == "event":
            self._event = value
        elif name == "data":
            self._data.append(value)
        elif name == "id":
            if "\0" not in value:
                self._last_id = value
        elif name == "retry":
            if value.isdigit():
                self._retry = int(value)
        return None

    def _dispatch(self) -> ServerSentEvent | None:
        event_name, data, retry = self._event, self._data, self._retry
        self._event = None
        self._data = []
        self._retry = None

        if not data:
            return None

        return ServerSentEvent(
            event=event_name or "message",
            data="\n".join(data),
            id=self._last_id,
            retry=retry,
        )
