"""Tests for RequestMessage entity."""

import pytest

from contextkit.domain.entities import RequestMessage


class TestRequestMessage:
    """Tests for RequestMessage."""

    def test_with_content(self) -> None:
        """with_content returns a copy with the same role."""
        message = RequestMessage(role="user", content="hello")

        updated = message.with_content("bye")

        assert updated == RequestMessage(role="user", content="bye")
        assert message.content == "hello"

    def test_to_dict(self) -> None:
        """to_dict produces a request body entry."""
        message = RequestMessage(role="assistant", content="hi")

        assert message.to_dict() == {"role": "assistant", "content": "hi"}

    def test_frozen(self) -> None:
        """RequestMessage cannot be mutated."""
        message = RequestMessage(role="user", content="hello")

        with pytest.raises(AttributeError):
            message.content = "x"  # type: ignore[misc]
