"""Tests for request payload construction."""

import json

import pytest

from anthropic_messages.client import build_payload
from anthropic_messages.errors import ErrorKind, ValidationError
from anthropic_messages.types import (
    ImageBlock,
    ImageSource,
    Message,
    MessageMetadata,
    MessageRequest,
    Role,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)


def _request(**overrides) -> MessageRequest:
    values = {
        "model": "claude-3-5-sonnet-20240620",
        "max_tokens": 128,
        "messages": [Message.user("Hello")],
    }
    values.update(overrides)
    return MessageRequest(**values)


class TestBuildPayload:
    """Tests for the serialized form."""

    def test_minimal_payload(self) -> None:
        """Test absent optional fields are omitted, not null."""
        payload = build_payload(_request())
        assert payload == {
            "model": "claude-3-5-sonnet-20240620",
            "max_tokens": 128,
            "messages": [{"role": "user", "content": [{"type": "text", "text": "Hello"}]}],
        }

    def test_optional_fields(self) -> None:
        """Test set optional fields are emitted."""
        request = (
            _request()
            .with_system("be terse")
            .with_temperature(0.3)
            .with_top_p(0.9)
            .with_top_k(40)
            .with_stop_sequences(["END"])
            .with_metadata(MessageMetadata(user_id="u-1"))
        )
        payload = build_payload(request)
        assert payload["system"] == "be terse"
        assert payload["temperature"] == 0.3
        assert payload["top_p"] == 0.9
        assert payload["top_k"] == 40
        assert payload["stop_sequences"] == ["END"]
        assert payload["metadata"] == {"user_id": "u-1"}
        assert "stream" not in payload

    def test_round_trip(self) -> None:
        """Test the payload decodes back into an equivalent request."""
        request = _request(
            messages=[
                Message.user("What is in this image?"),
                Message(
                    role=Role.ASSISTANT,
                    content=[ToolUseBlock(id="toolu_1", name="look", input={"q": 1})],
                ),
                Message(
                    role=Role.USER,
                    content=[
                        ToolResultBlock(tool_use_id="toolu_1", content="a cat"),
                        ImageBlock(source=ImageSource.from_url("https://example.com/cat.png")),
                    ],
                ),
            ],
        ).with_temperature(1.0)

        payload = build_payload(request)
        decoded = MessageRequest.model_validate(json.loads(json.dumps(payload)))

        assert decoded == request

    def test_unknown_block_passes_through(self) -> None:
        """Test opaque blocks are serialized exactly as received."""
        raw = {"type": "document", "source": {"type": "text", "data": "x"}, "title": None}
        message = Message.model_validate({"role": "user", "content": [raw]})
        payload = build_payload(_request(messages=[message]))
        assert payload["messages"][0]["content"] == [raw]


class TestValidation:
    """Tests for request validation."""

    def test_empty_messages(self) -> None:
        """Test empty message list is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            build_payload(_request(messages=[]))
        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert exc_info.value.field == "messages"

    @pytest.mark.parametrize("max_tokens", [0, -1])
    def test_non_positive_max_tokens(self, max_tokens: int) -> None:
        """Test max_tokens must be positive."""
        with pytest.raises(ValidationError) as exc_info:
            build_payload(_request(max_tokens=max_tokens))
        assert exc_info.value.field == "max_tokens"
        assert exc_info.value.actual == max_tokens

    def test_empty_text_block(self) -> None:
        """Test empty text blocks are malformed."""
        request = _request(messages=[Message(role=Role.USER, content=[TextBlock(text="")])])
        with pytest.raises(ValidationError) as exc_info:
            build_payload(request)
        assert exc_info.value.field == "messages[0].content[0].text"

    def test_message_without_blocks(self) -> None:
        """Test a message needs at least one block."""
        request = _request(messages=[Message(role=Role.USER, content=[])])
        with pytest.raises(ValidationError, match="no content blocks"):
            build_payload(request)

    @pytest.mark.parametrize(
        ("setter", "value"),
        [
            ("with_temperature", 1.5),
            ("with_temperature", -0.1),
            ("with_top_p", 2.0),
            ("with_top_k", 0),
        ],
    )
    def test_sampling_ranges(self, setter: str, value: float) -> None:
        """Test sampling parameters are range checked."""
        request = getattr(_request(), setter)(value)
        with pytest.raises(ValidationError):
            build_payload(request)

    def test_base64_image_requires_data(self) -> None:
        """Test base64 images need data and media type."""
        block = ImageBlock(source=ImageSource(source_type="base64", media_type="image/png"))
        request = _request(messages=[Message(role=Role.USER, content=[block])])
        with pytest.raises(ValidationError) as exc_info:
            build_payload(request)
        assert exc_info.value.field == "messages[0].content[0].source.data"

    def test_url_image_requires_url(self) -> None:
        """Test url images need a url."""
        block = ImageBlock(source=ImageSource(source_type="url"))
        request = _request(messages=[Message(role=Role.USER, content=[block])])
        with pytest.raises(ValidationError, match="requires a url"):
            build_payload(request)

    def test_nested_tool_result_blocks_checked(self) -> None:
        """Test blocks inside a tool result are validated too."""
        block = ToolResultBlock(tool_use_id="toolu_1", content=[TextBlock(text="")])
        request = _request(messages=[Message(role=Role.USER, content=[block])])
        with pytest.raises(ValidationError) as exc_info:
            build_payload(request)
        assert exc_info.value.field == "messages[0].content[0].content[0].text"
