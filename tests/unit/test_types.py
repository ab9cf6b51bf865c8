"""Tests for the content model, responses and stream events."""

import base64

import pytest

from anthropic_messages.types import (
    ContentBlockDeltaEvent,
    ImageBlock,
    ImageSource,
    InputJsonDelta,
    Message,
    MessageRequest,
    MessageResponse,
    Role,
    StopReason,
    TextBlock,
    TextDelta,
    ToolResultBlock,
    ToolUseBlock,
    UnknownBlock,
    UnknownDelta,
)


class TestMessage:
    """Tests for Message."""

    def test_user_message(self) -> None:
        """Test user shorthand builds a single text block."""
        msg = Message.user("Hello")
        assert msg.role == Role.USER
        assert msg.content == [TextBlock(text="Hello")]

    def test_assistant_message(self) -> None:
        """Test assistant shorthand."""
        msg = Message.assistant("Hi there")
        assert msg.role == Role.ASSISTANT
        assert msg.get_text_content() == "Hi there"

    def test_string_content_coerced(self) -> None:
        """Test plain string content becomes a text block."""
        msg = Message.model_validate({"role": "user", "content": "hi"})
        assert msg.content == [TextBlock(text="hi")]

    def test_role_serializes_lowercase(self) -> None:
        """Test role wire form."""
        assert Message.user("x").model_dump(mode="json")["role"] == "user"

    def test_block_order_preserved(self) -> None:
        """Test content block ordering survives decoding."""
        msg = Message.model_validate({
            "role": "user",
            "content": [
                {"type": "text", "text": "first"},
                {"type": "image", "source": {"type": "url", "url": "https://x/y.png"}},
                {"type": "text", "text": "last"},
            ],
        })
        assert isinstance(msg.content[0], TextBlock)
        assert isinstance(msg.content[1], ImageBlock)
        assert msg.content[2].text == "last"

    def test_messages_are_immutable(self) -> None:
        """Test messages are frozen."""
        msg = Message.user("x")
        with pytest.raises(Exception):
            msg.role = Role.ASSISTANT  # type: ignore[misc]


class TestContentBlocks:
    """Tests for content block decoding."""

    def test_tool_use_block(self) -> None:
        """Test tool_use decodes into ToolUseBlock."""
        msg = Message.model_validate({
            "role": "assistant",
            "content": [
                {"type": "tool_use", "id": "toolu_1", "name": "get_weather", "input": {"city": "Paris"}}
            ],
        })
        block = msg.content[0]
        assert isinstance(block, ToolUseBlock)
        assert block.input == {"city": "Paris"}

    def test_tool_result_with_blocks(self) -> None:
        """Test tool_result nested content."""
        block = ToolResultBlock(tool_use_id="toolu_1", content=[TextBlock(text="18C")])
        assert block.model_dump(mode="json", exclude_none=True) == {
            "type": "tool_result",
            "tool_use_id": "toolu_1",
            "content": [{"type": "text", "text": "18C"}],
        }

    def test_unknown_block_preserved(self) -> None:
        """Test unknown block kinds are kept opaquely."""
        raw = {"type": "thinking", "thinking": "hmm", "signature": "abc", "extra": None}
        msg = Message.model_validate({"role": "assistant", "content": [raw]})
        block = msg.content[0]
        assert isinstance(block, UnknownBlock)
        assert block.type == "thinking"
        assert block.raw == raw

    def test_image_source_alias(self) -> None:
        """Test image source serializes its kind as 'type'."""
        block = ImageBlock(source=ImageSource.from_base64("aGk=", "image/png"))
        dumped = block.model_dump(mode="json", by_alias=True, exclude_none=True)
        assert dumped == {
            "type": "image",
            "source": {"type": "base64", "media_type": "image/png", "data": "aGk="},
        }

    def test_image_from_file(self, tmp_path) -> None:
        """Test loading an image block from disk."""
        path = tmp_path / "pixel.png"
        path.write_bytes(b"\x89PNG\r\n")
        block = ImageBlock.from_file(path)
        assert block.source.media_type == "image/png"
        assert base64.standard_b64decode(block.source.data or "") == b"\x89PNG\r\n"


class TestMessageRequest:
    """Tests for MessageRequest."""

    def test_with_setters_return_copies(self) -> None:
        """Test with_* setters leave the original untouched."""
        base = MessageRequest(model="m", max_tokens=10, messages=[Message.user("x")])
        changed = base.with_temperature(0.5).with_top_k(3).with_system("be brief")
        assert base.temperature is None
        assert changed.temperature == 0.5
        assert changed.top_k == 3
        assert changed.system == "be brief"

    def test_construction_does_not_validate_invariants(self) -> None:
        """Test invalid values are accepted until the payload is built."""
        request = MessageRequest(model="m", max_tokens=0)
        assert request.messages == []


class TestMessageResponse:
    """Tests for MessageResponse."""

    def test_decode(self) -> None:
        """Test decoding a complete response."""
        response = MessageResponse.model_validate({
            "id": "msg_1",
            "type": "message",
            "model": "m",
            "role": "assistant",
            "content": [{"type": "text", "text": "hi"}],
            "stop_reason": "end_turn",
            "stop_sequence": None,
            "usage": {"input_tokens": 3, "output_tokens": 1},
        })
        assert response.text == "hi"
        assert response.stop_reason == StopReason.END_TURN

    def test_unknown_stop_reason(self) -> None:
        """Test unrecognized stop reasons decode as UNKNOWN."""
        response = MessageResponse.model_validate({
            "id": "msg_1",
            "model": "m",
            "role": "assistant",
            "content": [],
            "stop_reason": "refusal",
            "usage": {"input_tokens": 0, "output_tokens": 0},
        })
        assert response.stop_reason == StopReason.UNKNOWN

    def test_extra_fields_ignored(self) -> None:
        """Test unknown top-level fields are ignored."""
        response = MessageResponse.model_validate({
            "id": "msg_1",
            "model": "m",
            "role": "assistant",
            "content": [],
            "usage": {"input_tokens": 0, "output_tokens": 0, "cache_read_input_tokens": 4},
            "container": {"id": "c"},
        })
        assert response.stop_reason is None


class TestDeltas:
    """Tests for delta decoding."""

    def test_known_deltas(self) -> None:
        """Test text and JSON deltas select their models."""
        text = ContentBlockDeltaEvent.model_validate(
            {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": "a"}}
        )
        tool = ContentBlockDeltaEvent.model_validate(
            {"type": "content_block_delta", "index": 1, "delta": {"type": "input_json_delta", "partial_json": "{"}}
        )
        assert isinstance(text.delta, TextDelta)
        assert isinstance(tool.delta, InputJsonDelta)

    def test_unknown_delta(self) -> None:
        """Test unknown delta kinds keep their fields."""
        event = ContentBlockDeltaEvent.model_validate(
            {"type": "content_block_delta", "index": 0, "delta": {"type": "thinking_delta", "thinking": "hm"}}
        )
        assert isinstance(event.delta, UnknownDelta)
        assert event.delta.model_extra == {"thinking": "hm"}
