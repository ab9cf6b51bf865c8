"""
Client facade for the Messages endpoint.

Composes request building, transport and response decoding into the two
call modes: ``create_message`` and ``stream_message``.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from anthropic_messages.client.builder import build_payload
from anthropic_messages.client.config import ClientConfig
from anthropic_messages.client.state import CallState, log_transition, new_call_id
from anthropic_messages.client.stream import MessageStream, MessageStreamManager
from anthropic_messages.errors import ApiError
from anthropic_messages.pipeline import decode_message_response
from anthropic_messages.transport import HttpTransport

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    import httpx

    from anthropic_messages.types import MessageRequest, MessageResponse


class AnthropicClient:
    """Client for the Messages endpoint.

    The client holds only immutable configuration and a shared HTTP
    connection pool, so one instance may serve many concurrent calls.

    Example:
        >>> async with AnthropicClient(api_key="sk-ant-...") as client:
        ...     response = await client.create_message(
        ...         MessageRequest(
        ...             model="claude-3-5-sonnet-20240620",
        ...             max_tokens=256,
        ...             messages=[Message.user("Hello!")],
        ...         )
        ...     )
        ...     print(response.text)
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        api_key: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the client.

        Args:
            config: Client configuration; built from the environment when omitted
            api_key: API key, overriding the one in ``config`` or the environment
            http_client: Externally owned httpx client to send requests with
            sleep: Backoff sleep function (replaceable in tests)

        Raises:
            ValueError: If no API key can be resolved
        """
        if config is None:
            config = ClientConfig.from_env(api_key)
        elif api_key:
            config = replace(config, api_key=api_key)

        self._config = config
        self._transport = HttpTransport(config, http_client=http_client, sleep=sleep)

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def create_message(self, request: MessageRequest) -> MessageResponse:
        """Send a request and return the complete response.

        A request with ``stream`` set is sent as a streaming call and the
        events are folded into the returned message.

        Raises:
            ValidationError: The request is malformed (nothing is sent)
            HttpError: The service returned a structured error
            TransportError: Network failure or timeout
            RetriesExhaustedError: Transient failures used up the retry budget
            DecodeError: The response did not match the message schema
        """
        call_id = new_call_id()
        log_transition(call_id, CallState.BUILDING, model=request.model)

        try:
            payload = build_payload(request)
        except ApiError as e:
            log_transition(call_id, CallState.FAILED, error=e.kind.value)
            raise

        if request.stream:
            payload["stream"] = True
            async with await self._open_stream(payload, call_id) as stream:
                return await stream.get_final_message()

        try:
            log_transition(call_id, CallState.SENDING)
            response = await self._transport.execute(payload)

            log_transition(call_id, CallState.DECODING, status_code=response.status_code)
            message = decode_message_response(response.content)
        except ApiError as e:
            log_transition(call_id, CallState.FAILED, error=e.kind.value)
            raise

        stop_reason = message.stop_reason.value if message.stop_reason else None
        log_transition(call_id, CallState.DONE, stop_reason=stop_reason)
        return message

    def stream_message(self, request: MessageRequest) -> MessageStreamManager:
        """Start a streaming call.

        The request is validated immediately; nothing is sent until the
        returned manager is entered or iterated.

        Raises:
            ValidationError: The request is malformed
        """
        call_id = new_call_id()
        log_transition(call_id, CallState.BUILDING, model=request.model)

        try:
            payload = build_payload(request)
        except ApiError as e:
            log_transition(call_id, CallState.FAILED, error=e.kind.value)
            raise
        payload["stream"] = True

        return MessageStreamManager(lambda: self._open_stream(payload, call_id))

    async def _open_stream(self, payload: dict[str, Any], call_id: str) -> MessageStream:
        log_transition(call_id, CallState.SENDING, stream=True)
        try:
            response = await self._transport.execute(payload, stream=True)
        except ApiError as e:
            log_transition(call_id, CallState.FAILED, error=e.kind.value)
            raise
        log_transition(call_id, CallState.STREAMING, status_code=response.status_code)
        return MessageStream(response, call_id=call_id)

    async def close(self) -> None:
        """Release the connection pool."""
        await self._transport.close()

    async def __aenter__(self) -> AnthropicClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
