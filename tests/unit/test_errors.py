"""Tests for errors module."""

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

import pytest

from anthropic_messages.errors import (
    ApiError,
    DecodeError,
    ErrorContext,
    ErrorKind,
    HttpError,
    ProtocolError,
    RetriesExhaustedError,
    ServiceErrorType,
    TransportError,
    ValidationError,
    classify_error,
    extract_error_message,
    is_retryable,
    parse_retry_after,
)


class TestErrorContext:
    """Tests for ErrorContext."""

    def test_empty_context(self) -> None:
        """Test empty context renders nothing."""
        assert str(ErrorContext()) == ""

    def test_context_rendering(self) -> None:
        """Test source, field path and hint are rendered."""
        ctx = ErrorContext(source="request", field_path="messages", hint="add one")
        assert str(ctx) == "[request] at 'messages' (hint: add one)"


class TestTaxonomy:
    """Tests for the error kinds."""

    def test_every_error_is_an_api_error(self) -> None:
        """Test all variants share the base class and carry a kind."""
        errors = [
            ValidationError("bad", field="max_tokens"),
            TransportError("down"),
            HttpError("nope", status_code=400, error_type=ServiceErrorType.INVALID_REQUEST),
            DecodeError("schema"),
            ProtocolError("order", index=1),
        ]
        kinds = {e.kind for e in errors}
        assert all(isinstance(e, ApiError) for e in errors)
        assert kinds == {
            ErrorKind.VALIDATION,
            ErrorKind.TRANSPORT,
            ErrorKind.HTTP,
            ErrorKind.DECODE,
            ErrorKind.PROTOCOL,
        }

    def test_validation_error_not_retryable(self) -> None:
        """Test validation failures are never retryable."""
        assert ValidationError("bad").retryable is False

    def test_transport_error_retryable(self) -> None:
        """Test network failures are retryable but deadlines are not."""
        assert TransportError("reset").retryable is True
        assert TransportError("late", is_timeout=True, is_deadline=True).retryable is False
        assert TransportError("html", status_code=502).retryable is True
        assert TransportError("html", status_code=404).retryable is False

    def test_transport_error_keeps_cause(self) -> None:
        """Test the underlying exception is chained."""
        cause = ConnectionResetError("peer")
        error = TransportError("reset", cause=cause)
        assert error.__cause__ is cause

    def test_exhausted_wraps_last_cause(self) -> None:
        """Test exhaustion records the last failure and attempt count."""
        last = HttpError("busy", status_code=529, error_type=ServiceErrorType.OVERLOADED)
        error = RetriesExhaustedError(last, attempts=3)
        assert error.kind is ErrorKind.EXHAUSTED
        assert error.last_cause is last
        assert error.attempts == 3
        assert error.status_code == 529
        assert "Gave up after 3 attempt(s)" in str(error)


class TestHttpError:
    """Tests for HttpError.from_body."""

    def test_from_body(self) -> None:
        """Test classification, message and request id."""
        error = HttpError.from_body(
            400,
            {"type": "error", "error": {"type": "invalid_request_error", "message": "bad"}},
            {"Request-Id": "req_1"},
        )
        assert error.error_type == ServiceErrorType.INVALID_REQUEST
        assert error.message == "bad"
        assert error.request_id == "req_1"
        assert error.retryable is False

    def test_rate_limit_with_retry_after(self) -> None:
        """Test retry hints are read from headers."""
        error = HttpError.from_body(
            429,
            {"error": {"type": "rate_limit_error", "message": "slow down"}},
            {"retry-after": "7"},
        )
        assert error.retryable is True
        assert error.retry_after == 7.0

    def test_in_stream_error(self) -> None:
        """Test errors without a status classify from the body."""
        error = HttpError.from_body(None, {"type": "error", "error": {"type": "overloaded_error"}})
        assert error.error_type == ServiceErrorType.OVERLOADED
        assert error.status_code is None
        assert error.retryable is True


class TestClassification:
    """Tests for classification helpers."""

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (400, ServiceErrorType.INVALID_REQUEST),
            (401, ServiceErrorType.AUTHENTICATION),
            (403, ServiceErrorType.PERMISSION),
            (404, ServiceErrorType.NOT_FOUND),
            (413, ServiceErrorType.REQUEST_TOO_LARGE),
            (429, ServiceErrorType.RATE_LIMIT),
            (500, ServiceErrorType.INTERNAL),
            (529, ServiceErrorType.OVERLOADED),
            (418, ServiceErrorType.INVALID_REQUEST),
        ],
    )
    def test_status_fallback(self, status: int, expected: ServiceErrorType) -> None:
        """Test status mapping when the body has no type."""
        assert classify_error(status, {}) == expected

    def test_body_type_wins(self) -> None:
        """Test body error.type overrides the status."""
        body = {"error": {"type": "overloaded_error"}}
        assert classify_error(500, body) == ServiceErrorType.OVERLOADED

    def test_unknown_body_type_falls_back(self) -> None:
        """Test unrecognized types fall back to the status mapping."""
        body = {"error": {"type": "brand_new_error"}}
        assert classify_error(403, body) == ServiceErrorType.PERMISSION

    def test_is_retryable(self) -> None:
        """Test rate_limit and overloaded are retryable."""
        assert is_retryable(ServiceErrorType.RATE_LIMIT)
        assert is_retryable(ServiceErrorType.OVERLOADED)
        assert is_retryable(ServiceErrorType.INTERNAL, 500)
        assert not is_retryable(ServiceErrorType.AUTHENTICATION, 401)

    def test_extract_error_message(self) -> None:
        """Test message extraction from envelopes."""
        assert extract_error_message({"error": {"message": "a"}}) == "a"
        assert extract_error_message({"message": "b"}) == "b"
        assert extract_error_message({}) is None


class TestParseRetryAfter:
    """Tests for retry-after parsing."""

    def test_milliseconds_preferred(self) -> None:
        """Test retry-after-ms wins over retry-after."""
        assert parse_retry_after({"retry-after-ms": "1500", "retry-after": "9"}) == 1.5

    def test_seconds(self) -> None:
        """Test delta-seconds form."""
        assert parse_retry_after({"retry-after": "2"}) == 2.0

    def test_http_date(self) -> None:
        """Test HTTP-date form."""
        when = datetime.now(timezone.utc) + timedelta(seconds=30)
        value = parse_retry_after({"retry-after": format_datetime(when, usegmt=True)})
        assert value is not None
        assert 25 <= value <= 31

    def test_garbage(self) -> None:
        """Test unparseable values are ignored."""
        assert parse_retry_after({"retry-after": "soon"}) is None
        assert parse_retry_after({}) is None
