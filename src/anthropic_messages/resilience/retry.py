"""
Retry policy with exponential backoff and jitter.

The policy is plain data (RetryConfig) plus a small executor (RetryPolicy),
so tests can inject a zero-delay configuration and a fake sleep.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from anthropic_messages.errors import (
    RETRYABLE_STATUS,
    RETRYABLE_TYPES,
    HttpError,
    ServiceErrorType,
    TransportError,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")


class JitterStrategy(str, Enum):
    """Jitter strategy for retry delays."""

    NONE = "none"
    FULL = "full"
    EQUAL = "equal"


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry policy.

    The retry sets here decide what the transport retries. They may differ
    from ``ApiError.retryable``, which reports the default classification.

    Attributes:
        max_retries: Maximum number of retry attempts (0 = no retries). A client
            replaces this with ``ClientConfig.max_retries``.
        min_delay_ms: Base delay for the first retry in milliseconds
        max_delay_ms: Cap on the computed backoff in milliseconds
        jitter: Jitter strategy (none, full, equal)
        retry_on_status: HTTP status codes to retry on
        retry_on_error_type: Service error types to retry on
        retry_on_transport: Whether network failures and timeouts are retried
        exponential_base: Growth factor between attempts
    """

    max_retries: int = 2
    min_delay_ms: int = 500
    max_delay_ms: int = 8000
    jitter: JitterStrategy = JitterStrategy.FULL
    retry_on_status: frozenset[int] = field(default=RETRYABLE_STATUS)
    retry_on_error_type: frozenset[ServiceErrorType] = field(default=RETRYABLE_TYPES)
    retry_on_transport: bool = True
    exponential_base: float = 2.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")

    @classmethod
    def no_retry(cls) -> RetryConfig:
        """Create a config that disables retries."""
        return cls(max_retries=0)

    @classmethod
    def immediate(cls, max_retries: int = 2) -> RetryConfig:
        """Create a config that retries without waiting."""
        return cls(max_retries=max_retries, min_delay_ms=0, jitter=JitterStrategy.NONE)


@dataclass
class RetryResult:
    """Result of a retry operation.

    Attributes:
        success: Whether the operation succeeded
        value: The result value (if success)
        error: The last error (if failed)
        attempts: Number of attempts made
        total_delay_ms: Total delay from retries in milliseconds
        exhausted: True when the last error was retryable but the retry budget
            ran out (never set when retries are disabled)
    """

    success: bool
    value: Any = None
    error: Exception | None = None
    attempts: int = 0
    total_delay_ms: float = 0.0
    exhausted: bool = False


class RetryPolicy:
    """Retry policy with exponential backoff and jitter.

    Example:
        >>> policy = RetryPolicy(RetryConfig(max_retries=3))
        >>> result = await policy.execute(send_once)
        >>> if not result.success:
        ...     print(f"Failed after {result.attempts} attempts")
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._config = config or RetryConfig()
        self._sleep = sleep

    @property
    def config(self) -> RetryConfig:
        return self._config

    def calculate_delay(self, attempt: int, retry_after: float | None = None) -> float:
        """Calculate delay before the next attempt.

        Args:
            attempt: Number of the failed attempt (0-based)
            retry_after: Optional retry-after hint from server, in seconds

        Returns:
            Delay in seconds; never shorter than ``retry_after``
        """
        base_delay_ms = self._config.min_delay_ms * (
            self._config.exponential_base ** attempt
        )
        base_delay_ms = min(base_delay_ms, self._config.max_delay_ms)

        if self._config.jitter == JitterStrategy.FULL:
            delay_ms = random.uniform(0, base_delay_ms)
        elif self._config.jitter == JitterStrategy.EQUAL:
            delay_ms = base_delay_ms / 2 + random.uniform(0, base_delay_ms / 2)
        else:
            delay_ms = base_delay_ms

        delay = delay_ms / 1000.0
        if retry_after is not None and retry_after > delay:
            return retry_after
        return delay

    def is_retryable(self, error: Exception) -> bool:
        """Check if an error is transient under this policy."""
        if isinstance(error, HttpError):
            return (
                error.error_type in self._config.retry_on_error_type
                or error.status_code in self._config.retry_on_status
            )

        if isinstance(error, TransportError):
            if error.is_deadline:
                return False
            if error.status_code is not None:
                return error.status_code in self._config.retry_on_status
            return self._config.retry_on_transport

        return False

    def should_retry(self, error: Exception, attempt: int) -> bool:
        """Check if an error should trigger another attempt.

        Args:
            error: The exception that occurred
            attempt: Number of the failed attempt (0-based)
        """
        if attempt >= self._config.max_retries:
            return False
        return self.is_retryable(error)

    def get_retry_after(self, error: Exception) -> float | None:
        """Get retry-after hint from error."""
        if isinstance(error, (HttpError, TransportError)):
            return error.retry_after
        return None

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        on_retry: Callable[[int, Exception, float], None] | None = None,
    ) -> RetryResult:
        """Execute an operation with retry.

        Args:
            operation: Async operation to execute
            on_retry: Optional callback called before each retry with
                (attempt number, error, delay in seconds)

        Returns:
            RetryResult with success status and value/error
        """
        total_delay = 0.0
        attempt = 0

        while True:
            try:
                result = await operation()
                return RetryResult(
                    success=True,
                    value=result,
                    attempts=attempt + 1,
                    total_delay_ms=total_delay * 1000,
                )
            except Exception as e:
                attempt += 1

                if not self.should_retry(e, attempt - 1):
                    return RetryResult(
                        success=False,
                        error=e,
                        attempts=attempt,
                        total_delay_ms=total_delay * 1000,
                        exhausted=self._config.max_retries > 0 and self.is_retryable(e),
                    )

                delay = self.calculate_delay(attempt - 1, self.get_retry_after(e))
                total_delay += delay

                if on_retry:
                    on_retry(attempt, e, delay)

                await self._sleep(delay)
