"""Tests for PromptCard entity."""

from datetime import datetime, timezone

import pytest

from contextkit.domain.entities import (
    DEFAULT_CARD_PRIORITY,
    PromptCard,
    create_prompt_card,
)


class TestPromptCard:
    """Tests for PromptCard entity."""

    @pytest.fixture
    def now(self) -> datetime:
        """Create a fixed current time for testing."""
        return datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def test_create_with_valid_params(self, now: datetime) -> None:
        """Test creating PromptCard with valid parameters."""
        card = PromptCard(
            id="prompt_1",
            title="Style",
            content="Be concise.",
            placement="user_end",
            enabled=True,
            order=0,
            priority=3,
            created_at=now,
            updated_at=now,
        )

        assert card.placement == "user_end"
        assert card.priority == 3

    def test_invalid_placement(self, now: datetime) -> None:
        """Test that an unknown placement raises ValueError."""
        with pytest.raises(ValueError, match="Placement"):
            PromptCard(
                id="prompt_1",
                title="Style",
                content="Be concise.",
                placement="footer",  # type: ignore[arg-type]
                enabled=True,
                order=0,
                priority=5,
                created_at=now,
                updated_at=now,
            )

    def test_immutable(self, now: datetime) -> None:
        """Test that PromptCard is frozen."""
        card = create_prompt_card("t", "c", order=0)

        with pytest.raises(AttributeError):
            card.title = "changed"  # type: ignore[misc]


class TestCreatePromptCard:
    """Tests for create_prompt_card factory."""

    def test_defaults(self) -> None:
        """Test default values."""
        card = create_prompt_card("Title", "Content", order=2)

        assert card.id.startswith("prompt_")
        assert card.placement == "system"
        assert card.enabled is True
        assert card.order == 2
        assert card.priority == DEFAULT_CARD_PRIORITY
        assert card.created_at == card.updated_at
        assert card.created_at.tzinfo is not None

    def test_unique_ids(self) -> None:
        """Test that each card gets its own id."""
        first = create_prompt_card("a", "a", order=0)
        second = create_prompt_card("b", "b", order=1)

        assert first.id != second.id
