"""Persistence infrastructure."""

from contextkit.infrastructure.persistence.database import DatabaseManager
from contextkit.infrastructure.persistence.exceptions import (
    DatabaseError,
    PersistenceError,
)
from contextkit.infrastructure.persistence.models import PromptCardModel
from contextkit.infrastructure.persistence.prompt_card_repository import (
    SQLitePromptCardRepository,
)

__all__ = [
    "DatabaseError",
    "DatabaseManager",
    "PersistenceError",
    "PromptCardModel",
    "SQLitePromptCardRepository",
]
