"""Domain entities."""

from contextkit.domain.entities.context_metadata import ContextMetadata
from contextkit.domain.entities.conversation import (
    ConversationTree,
    get_conversation_history,
)
from contextkit.domain.entities.message import (
    REQUEST_ROLES,
    FlatMessage,
    MessageRole,
    RequestMessage,
)
from contextkit.domain.entities.prompt_card import (
    DEFAULT_CARD_PRIORITY,
    PROMPT_CARD_PLACEMENTS,
    PromptCard,
    PromptCardPlacement,
    create_prompt_card,
)

__all__ = [
    "DEFAULT_CARD_PRIORITY",
    "PROMPT_CARD_PLACEMENTS",
    "REQUEST_ROLES",
    "ContextMetadata",
    "ConversationTree",
    "FlatMessage",
    "MessageRole",
    "PromptCard",
    "PromptCardPlacement",
    "RequestMessage",
    "create_prompt_card",
    "get_conversation_history",
]
