"""
Client configuration.

ClientConfig is built once and shared read-only by every call made through
a client, including concurrent ones.
"""

from __future__ import annotations

import contextlib
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType

from anthropic_messages.resilience import RetryConfig
from anthropic_messages.transport.auth import resolve_api_key

DEFAULT_BASE_URL = "https://api.anthropic.com"

# Default timeouts (seconds)
DEFAULT_REQUEST_TIMEOUT = 600.0
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_MAX_RETRIES = 2


class AnthropicVersion(str, Enum):
    """Value of the ``anthropic-version`` header."""

    LATEST = "2023-06-01"
    INITIAL = "2023-01-01"


class ApiVersion(str, Enum):
    """URL path version segment."""

    V1 = "v1"


@dataclass(frozen=True)
class ClientConfig:
    """Immutable client configuration.

    Attributes:
        api_key: API key sent as ``x-api-key``
        base_url: Service root URL
        api_version: URL path version
        anthropic_version: Protocol version header value
        request_timeout: Per-attempt timeout in seconds
        connect_timeout: Connection establishment timeout in seconds
        total_timeout: Deadline for the whole call across retries, or None
        max_retries: Retries after the first attempt
        retry: Backoff policy; its ``max_retries`` is overridden by ``max_retries``
        default_headers: Extra headers sent with every request
    """

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    api_version: ApiVersion = ApiVersion.V1
    anthropic_version: AnthropicVersion = AnthropicVersion.LATEST
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    total_timeout: float | None = None
    max_retries: int = DEFAULT_MAX_RETRIES
    retry: RetryConfig = field(default_factory=RetryConfig)
    default_headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError(
                "API key required: pass api_key or set ANTHROPIC_API_KEY"
            )
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        if self.total_timeout is not None and self.total_timeout <= 0:
            raise ValueError("total_timeout must be positive")
        object.__setattr__(
            self, "default_headers", MappingProxyType(dict(self.default_headers))
        )

    @classmethod
    def from_env(cls, api_key: str | None = None, **overrides: object) -> ClientConfig:
        """Build a config from the environment.

        Reads ANTHROPIC_API_KEY (falling back to the keyring),
        ANTHROPIC_BASE_URL, ANTHROPIC_TIMEOUT_SECS and ANTHROPIC_MAX_RETRIES.
        Keyword overrides win over the environment.
        """
        values: dict[str, object] = {}

        base_url = os.getenv("ANTHROPIC_BASE_URL")
        if base_url:
            values["base_url"] = base_url

        timeout = os.getenv("ANTHROPIC_TIMEOUT_SECS")
        if timeout:
            with contextlib.suppress(ValueError):
                values["request_timeout"] = float(timeout)

        max_retries = os.getenv("ANTHROPIC_MAX_RETRIES")
        if max_retries:
            with contextlib.suppress(ValueError):
                values["max_retries"] = int(max_retries)

        values.update(overrides)
        return cls(api_key=resolve_api_key(api_key) or "", **values)  # type: ignore[arg-type]

    @property
    def messages_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.api_version.value}/messages"

    def retry_config(self) -> RetryConfig:
        """The effective retry policy for this client."""
        return replace(self.retry, max_retries=self.max_retries)
