"""Application services."""

from contextkit.application.services.prompt_card_manager import PromptCardManager

__all__ = ["PromptCardManager"]
