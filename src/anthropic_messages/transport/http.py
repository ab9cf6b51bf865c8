"""HTTP transport using httpx for async requests.

Provides:
- Required header management (auth, protocol version)
- Per-attempt and whole-call timeouts
- Retry with backoff around transient failures
- Streaming responses handed out unread
"""

from __future__ import annotations

import asyncio
import os
from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING, Any

import httpx

from anthropic_messages._features import HAS_HTTP2
from anthropic_messages.errors import ApiError, RetriesExhaustedError, TransportError
from anthropic_messages.pipeline.response import error_from_response
from anthropic_messages.resilience import RetryPolicy
from anthropic_messages.telemetry import get_logger
from anthropic_messages.transport.auth import get_auth_header

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from anthropic_messages.client.config import ClientConfig

logger = get_logger(__name__)

_UA_VERSION: str | None = None


def _trust_env_enabled() -> bool:
    """Use env proxy settings only when explicitly enabled."""
    return os.getenv("ANTHROPIC_HTTP_TRUST_ENV", "0") == "1"


def _get_ua_version() -> str:
    """Get package version for User-Agent (cached)."""
    global _UA_VERSION
    if _UA_VERSION is None:
        try:
            _UA_VERSION = version("anthropic-messages")
        except PackageNotFoundError:
            _UA_VERSION = "0.1.0"
    return _UA_VERSION


class HttpTransport:
    """HTTP transport for the Messages endpoint.

    One transport is shared by every call of a client. It holds no per-call
    state, so concurrent calls are safe.

    Example:
        >>> async with HttpTransport(config) as transport:
        ...     response = await transport.execute(payload)
        ...     print(response.json())
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize HTTP transport.

        Args:
            config: Client configuration
            http_client: Externally owned httpx client; not closed by ``close()``
            sleep: Backoff sleep function (replaceable in tests)
        """
        self._config = config
        self._url = config.messages_url
        self._timeout = httpx.Timeout(
            config.request_timeout,
            connect=config.connect_timeout,
        )
        self._policy = RetryPolicy(config.retry_config(), sleep=sleep)
        self._auth_headers = get_auth_header(config.api_key)

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            http2=HAS_HTTP2,
            trust_env=_trust_env_enabled(),
        )

    @property
    def url(self) -> str:
        return self._url

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._policy

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    def _build_headers(self, *, stream: bool) -> dict[str, str]:
        """Build request headers.

        Configured default headers are applied last and may override the
        built-in ones.
        """
        headers = {
            "anthropic-version": self._config.anthropic_version.value,
            "content-type": "application/json",
            "accept": "text/event-stream" if stream else "application/json",
            "user-agent": f"anthropic-messages/{_get_ua_version()}",
        }
        headers.update(self._auth_headers)
        headers.update(self._config.default_headers)
        return headers

    async def execute(self, payload: dict[str, Any], *, stream: bool = False) -> httpx.Response:
        """POST a payload, retrying transient failures.

        Args:
            payload: Serialized request body
            stream: Return the response with its body unread

        Returns:
            A 2xx response. When ``stream`` is set the caller owns it and must
            ``aclose()`` it; otherwise the body is already read.

        Raises:
            TransportError: Network failure, timeout or unparseable error body
            HttpError: Structured service error
            RetriesExhaustedError: Every permitted attempt failed transiently
        """
        total = self._config.total_timeout
        if total is None:
            return await self._execute_with_retry(payload, stream)

        try:
            return await asyncio.wait_for(self._execute_with_retry(payload, stream), total)
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Call deadline of {total}s exceeded",
                url=self._url,
                cause=e,
                is_timeout=True,
                is_deadline=True,
            ) from e

    async def _execute_with_retry(self, payload: dict[str, Any], stream: bool) -> httpx.Response:
        result = await self._policy.execute(
            lambda: self._send_once(payload, stream),
            on_retry=self._log_retry,
        )
        if result.success:
            return result.value

        error = result.error
        assert error is not None
        if result.exhausted and isinstance(error, ApiError):
            raise RetriesExhaustedError(error, result.attempts) from error
        raise error

    async def _send_once(self, payload: dict[str, Any], stream: bool) -> httpx.Response:
        """Make a single attempt, bounded as a whole by ``request_timeout``.

        httpx timeouts apply per socket operation, so a slow trickle of bytes
        would never trip them. For streaming calls only the open is bounded.
        """
        timeout = self._config.request_timeout
        try:
            return await asyncio.wait_for(self._attempt(payload, stream), timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Attempt exceeded {timeout}s",
                url=self._url,
                cause=e,
                is_timeout=True,
            ) from e

    async def _attempt(self, payload: dict[str, Any], stream: bool) -> httpx.Response:
        """Send once and map failures.

        Error responses are read, closed and mapped before raising, so a
        failed attempt never holds a connection.
        """
        request = self._client.build_request(
            "POST",
            self._url,
            json=payload,
            headers=self._build_headers(stream=stream),
            timeout=self._timeout,
        )

        try:
            response = await self._client.send(request, stream=stream)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request timed out: {e}",
                url=self._url,
                cause=e,
                is_timeout=True,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"Connection failed: {e}",
                url=self._url,
                cause=e,
            ) from e

        if response.is_success:
            return response

        try:
            body = await response.aread()
        except httpx.HTTPError as e:
            raise TransportError(
                f"Failed to read error body: {e}",
                url=self._url,
                status_code=response.status_code,
                cause=e,
            ) from e
        finally:
            await response.aclose()

        raise error_from_response(
            response.status_code,
            body,
            response.headers,
            url=self._url,
        )

    def _log_retry(self, attempt: int, error: Exception, delay: float) -> None:
        logger.warning(
            "Retrying request",
            attempt=attempt,
            delay_s=round(delay, 3),
            error=str(error),
            status_code=getattr(error, "status_code", None),
        )

    async def __aenter__(self) -> HttpTransport:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
