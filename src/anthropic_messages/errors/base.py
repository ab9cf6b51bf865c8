"""Base error classes for anthropic-messages.

Provides a tagged error taxonomy:
- ApiError: Base class for all library errors, tagged with an ErrorKind
- ValidationError: Malformed request detected before sending
- TransportError: Network-level failure or unparseable error response
- HttpError: Structured service error (non-2xx with JSON error body)
- DecodeError / StreamDecodeError: Response did not match the schema
- ProtocolError: Stream violated event-ordering invariants
- IncompleteStreamError: Stream ended before a terminal event
- RetriesExhaustedError: Retry budget consumed
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from anthropic_messages.errors.classification import ServiceErrorType


class ErrorKind(str, Enum):
    """Discriminator for the error taxonomy."""

    VALIDATION = "validation"
    TRANSPORT = "transport"
    HTTP = "http"
    DECODE = "decode"
    STREAM_DECODE = "stream_decode"
    PROTOCOL = "protocol"
    INCOMPLETE_STREAM = "incomplete_stream"
    EXHAUSTED = "exhausted"


@dataclass
class ErrorContext:
    """Structured error context for diagnostics."""

    field_path: str | None = None
    """Path to the problematic field (e.g., 'messages[0].content[1].text')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'request', 'transport', 'stream')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class ApiError(Exception):
    """Base class for all anthropic-messages errors.

    Every failure surfaced by the client is an ApiError. The ``kind``
    attribute tells the variants apart without isinstance chains:

        >>> try:
        ...     await client.create_message(request)
        ... except ApiError as e:
        ...     if e.kind is ErrorKind.HTTP and e.retryable:
        ...         schedule_retry()

    Attributes:
        message: Human-readable error message
        context: Structured error context
        status_code: HTTP status, when one was observed
        body: Raw response body (parsed JSON or text), when one was observed
        retry_after: Server-supplied retry hint in seconds
        retryable: Whether the default policy treats this failure as transient.
            A custom RetryConfig may retry a different set.
    """

    kind: ClassVar[ErrorKind]
    retryable: bool = False

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        status_code: int | None = None,
        body: Any = None,
        retry_after: float | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        self.status_code = status_code
        self.body = body
        self.retry_after = retry_after
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> ApiError:
        """Add a hint to this error."""
        self.context.hint = hint
        return self


class ValidationError(ApiError):
    """Malformed request detected before anything was sent.

    Raised when:
    - The message list is empty
    - max_tokens is not a positive integer
    - A content block is malformed
    - A sampling parameter is out of range
    """

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        actual: Any = None,
    ) -> None:
        ctx = context or ErrorContext(source="request")
        if field:
            ctx.field_path = field
        if actual is not None:
            ctx.details["actual"] = actual
        super().__init__(message, ctx)
        self.field = field
        self.actual = actual


class TransportError(ApiError):
    """Network-level failure.

    Raised when:
    - Connection or DNS failure
    - An attempt timed out, or the call deadline was exceeded
    - The connection dropped mid-stream
    - A non-2xx response carried a body that is not JSON
    """

    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        status_code: int | None = None,
        body: Any = None,
        cause: BaseException | None = None,
        retry_after: float | None = None,
        is_timeout: bool = False,
        is_deadline: bool = False,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        if status_code:
            ctx.details["status_code"] = status_code
        super().__init__(
            message, ctx, status_code=status_code, body=body, retry_after=retry_after
        )
        self.url = url
        self.is_timeout = is_timeout
        self.is_deadline = is_deadline
        self.__cause__ = cause

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        if self.is_deadline:
            return False
        from anthropic_messages.errors.classification import RETRYABLE_STATUS

        return self.status_code is None or self.status_code in RETRYABLE_STATUS


class HttpError(ApiError):
    """Structured error returned by the service.

    Attributes:
        error_type: Classified service error type
        request_id: Server request identifier, if provided
    """

    kind = ErrorKind.HTTP

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None,
        error_type: ServiceErrorType,
        body: Any = None,
        retry_after: float | None = None,
        request_id: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="service")
        if status_code is not None:
            ctx.details["status_code"] = status_code
        ctx.details["error_type"] = error_type.value
        if request_id:
            ctx.details["request_id"] = request_id
        super().__init__(
            message, ctx, status_code=status_code, body=body, retry_after=retry_after
        )
        self.error_type = error_type
        self.request_id = request_id

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        from anthropic_messages.errors.classification import is_retryable

        return is_retryable(self.error_type, self.status_code)

    @classmethod
    def from_body(
        cls,
        status_code: int | None,
        body: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> HttpError:
        """Create an HttpError from a parsed service error body.

        Args:
            status_code: HTTP status code (None for errors delivered in-stream)
            body: Parsed JSON body, normally ``{"type": "error", "error": {...}}``
            headers: Response headers

        Returns:
            HttpError with classification and retry hint
        """
        from anthropic_messages.errors.classification import (
            classify_error,
            extract_error_message,
            parse_retry_after,
        )

        error_type = classify_error(status_code, body)
        message = extract_error_message(body) or f"HTTP {status_code}"

        retry_after = None
        request_id = None
        if headers:
            lowered = {k.lower(): v for k, v in headers.items()}
            retry_after = parse_retry_after(lowered)
            request_id = lowered.get("request-id") or lowered.get("x-request-id")
        if isinstance(body.get("request_id"), str):
            request_id = body["request_id"]

        return cls(
            message,
            status_code=status_code,
            error_type=error_type,
            body=body,
            retry_after=retry_after,
            request_id=request_id,
        )


class DecodeError(ApiError):
    """A complete response did not match the expected schema."""

    kind = ErrorKind.DECODE

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        body: Any = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, context or ErrorContext(source="response"), body=body)
        self.__cause__ = cause


class StreamDecodeError(ApiError):
    """A single stream frame of a recognized event type could not be decoded.

    Already-delivered events stay valid; the stream may be pulled again.
    """

    kind = ErrorKind.STREAM_DECODE

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        event: str | None = None,
        data: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="stream")
        if event:
            ctx.details["event"] = event
        super().__init__(message, ctx, body=data)
        self.event = event
        self.data = data
        self.__cause__ = cause


class ProtocolError(ApiError):
    """A stream violated the event-ordering invariants."""

    kind = ErrorKind.PROTOCOL

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        index: int | None = None,
        event: str | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="accumulator")
        if index is not None:
            ctx.details["index"] = index
        if event:
            ctx.details["event"] = event
        super().__init__(message, ctx)
        self.index = index
        self.event = event


class IncompleteStreamError(ApiError):
    """Finalization was requested before the stream reached message_stop."""

    kind = ErrorKind.INCOMPLETE_STREAM

    def __init__(self, message: str, context: ErrorContext | None = None) -> None:
        super().__init__(message, context or ErrorContext(source="accumulator"))


class RetriesExhaustedError(ApiError):
    """Every permitted attempt failed with a retryable error.

    Attributes:
        last_cause: The failure observed on the final attempt
        attempts: Number of attempts made
    """

    kind = ErrorKind.EXHAUSTED

    def __init__(self, last_cause: ApiError, attempts: int) -> None:
        ctx = ErrorContext(source="transport")
        ctx.details["attempts"] = attempts
        ctx.details["last_kind"] = last_cause.kind.value
        super().__init__(
            f"Gave up after {attempts} attempt(s): {last_cause.message}",
            ctx,
            status_code=last_cause.status_code,
            body=last_cause.body,
            retry_after=last_cause.retry_after,
        )
        self.last_cause = last_cause
        self.attempts = attempts
        self.__cause__ = last_cause
