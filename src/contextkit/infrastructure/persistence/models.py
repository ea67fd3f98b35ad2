"""SQLModel table definitions."""

from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


class PromptCardModel(SQLModel, table=True):
    """プロンプトカードテーブル"""

    __tablename__ = "prompt_cards"

    id: str = Field(primary_key=True)
    title: str
    content: str
    placement: str = Field(default="system", index=True)
    enabled: bool = True
    order: int = Field(default=0, index=True)
    priority: int = 5
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
