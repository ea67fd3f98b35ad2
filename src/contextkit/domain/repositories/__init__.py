"""Domain repositories."""

from contextkit.domain.repositories.prompt_card_repository import (
    PromptCardRepository,
)

__all__ = ["PromptCardRepository"]
