"""Prompt card entity."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal
from uuid import uuid4

PromptCardPlacement = Literal["system", "after_system", "user_end"]

PROMPT_CARD_PLACEMENTS: tuple[str, ...] = ("system", "after_system", "user_end")

DEFAULT_CARD_PRIORITY = 5


@dataclass(frozen=True)
class PromptCard:
    """プロンプトカードエンティティ

    ユーザーが定義する再利用可能なプロンプト断片。

    Attributes:
        id: カードの一意識別子
        title: カードのタイトル
        content: プロンプト本文
        placement: 挿入位置
            - system: system メッセージに追記
            - after_system: system メッセージ直後に独立して挿入
            - user_end: 最後の user メッセージ末尾に追記
        enabled: 有効かどうか
        order: 並び順（小さいほど前）
        priority: 優先度（大きいほど前。after_system の挿入順にのみ使用）
        created_at: 作成日時
        updated_at: 更新日時
    """

    id: str
    title: str
    content: str
    placement: PromptCardPlacement
    enabled: bool
    order: int
    priority: int
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        """バリデーション"""
        if self.placement not in PROMPT_CARD_PLACEMENTS:
            raise ValueError(
                f"Placement must be one of {PROMPT_CARD_PLACEMENTS}, "
                f"got '{self.placement}'"
            )


def create_prompt_card(
    title: str,
    content: str,
    order: int,
    placement: PromptCardPlacement = "system",
    enabled: bool = True,
    priority: int = DEFAULT_CARD_PRIORITY,
) -> PromptCard:
    """PromptCard エンティティを生成する

    Args:
        title: カードのタイトル
        content: プロンプト本文
        order: 並び順
        placement: 挿入位置
        enabled: 有効かどうか
        priority: 優先度

    Returns:
        PromptCard エンティティ

    Raises:
        ValueError: placement が不正な場合
    """
    now = datetime.now(timezone.utc)
    return PromptCard(
        id=f"prompt_{uuid4().hex}",
        title=title,
        content=content,
        placement=placement,
        enabled=enabled,
        order=order,
        priority=priority,
        created_at=now,
        updated_at=now,
    )
