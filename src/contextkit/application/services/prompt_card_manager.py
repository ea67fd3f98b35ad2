"""Prompt card management service."""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from contextkit.config.models import PromptCardSeed
from contextkit.domain.entities.prompt_card import (
    DEFAULT_CARD_PRIORITY,
    PromptCard,
    PromptCardPlacement,
    create_prompt_card,
)
from contextkit.domain.repositories import PromptCardRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"title", "content", "placement", "enabled", "priority"})


class PromptCardManager:
    """プロンプトカード管理サービス

    カードをメモリ上にキャッシュし、変更はリポジトリへ永続化する。
    ContextEngine からは get_enabled_cards() で同期的に参照される
    （PromptCardSource プロトコルを満たす）。
    """

    def __init__(
        self,
        repository: PromptCardRepository,
        default_cards: list[PromptCardSeed] | None = None,
    ) -> None:
        """初期化

        Args:
            repository: カードリポジトリ
            default_cards: ストアが空の場合に投入するカード
        """
        self._repository = repository
        self._default_cards = default_cards or []
        self._cards: list[PromptCard] = []
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """ストアからカードを読み込む

        ストアが空の場合はデフォルトカードを投入する。2回目以降の呼び出しは何もしない。
        """
        if self._initialized:
            return

        cards = await self._repository.find_all()
        if not cards and self._default_cards:
            for order, seed in enumerate(self._default_cards):
                card = create_prompt_card(
                    title=seed.title,
                    content=seed.content,
                    order=order,
                    placement=seed.placement,  # type: ignore[arg-type]
                    enabled=seed.enabled,
                    priority=seed.priority,
                )
                await self._repository.save(card)
                cards.append(card)
            logger.info("Seeded %d default prompt card(s)", len(cards))

        self._cards = list(cards)
        self._initialized = True
        logger.debug("Loaded %d prompt card(s)", len(self._cards))

    def get_all_cards(self) -> list[PromptCard]:
        """全カードを order 昇順で取得"""
        return sorted(self._cards, key=lambda card: card.order)

    def get_enabled_cards(self) -> list[PromptCard]:
        """有効なカードを order 昇順で取得"""
        return [card for card in self.get_all_cards() if card.enabled]

    def get_card_by_id(self, card_id: str) -> PromptCard | None:
        """ID でカードを取得"""
        for card in self._cards:
            if card.id == card_id:
                return card
        return None

    async def create_card(
        self,
        title: str,
        content: str,
        placement: PromptCardPlacement = "system",
        enabled: bool = True,
        priority: int = DEFAULT_CARD_PRIORITY,
    ) -> PromptCard:
        """カードを作成する

        order は既存の最大値 + 1 になる。

        Raises:
            ValueError: placement が不正な場合
        """
        await self.initialize()
        max_order = max((card.order for card in self._cards), default=-1)
        card = create_prompt_card(
            title=title,
            content=content,
            order=max_order + 1,
            placement=placement,
            enabled=enabled,
            priority=priority,
        )
        await self._repository.save(card)
        self._cards.append(card)
        logger.info("Created prompt card %s (%s)", card.id, card.placement)
        return card

    async def update_card(self, card_id: str, **changes: Any) -> PromptCard | None:
        """カードを更新する

        Args:
            card_id: 更新するカードの ID
            **changes: title, content, placement, enabled, priority のいずれか

        Returns:
            更新後のカード。存在しない場合は None

        Raises:
            ValueError: 更新できないフィールドが指定された、または placement が不正
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        await self.initialize()
        index = self._index_of(card_id)
        if index is None:
            return None

        updated = replace(
            self._cards[index], **changes, updated_at=datetime.now(timezone.utc)
        )
        await self._repository.save(updated)
        self._cards[index] = updated
        return updated

    async def delete_card(self, card_id: str) -> bool:
        """カードを削除する

        Returns:
            削除成功の場合 True、カードが存在しない場合 False
        """
        await self.initialize()
        index = self._index_of(card_id)
        if index is None:
            return False
        await self._repository.delete(card_id)
        del self._cards[index]
        logger.info("Deleted prompt card %s", card_id)
        return True

    async def toggle_card(self, card_id: str) -> PromptCard | None:
        """カードの有効/無効を切り替える"""
        await self.initialize()
        card = self.get_card_by_id(card_id)
        if card is None:
            return None
        return await self.update_card(card_id, enabled=not card.enabled)

    async def reorder_cards(self, ordered_ids: list[str]) -> None:
        """カードの並び順を更新する

        ordered_ids の位置を新しい order とする。未知の ID は無視する。
        """
        await self.initialize()
        now = datetime.now(timezone.utc)
        for order, card_id in enumerate(ordered_ids):
            index = self._index_of(card_id)
            if index is None:
                continue
            updated = replace(self._cards[index], order=order, updated_at=now)
            await self._repository.save(updated)
            self._cards[index] = updated

    async def clear_all(self) -> None:
        """全カードを削除する"""
        await self.initialize()
        deleted = await self._repository.delete_all()
        self._cards = []
        logger.info("Cleared %d prompt card(s)", deleted)

    def _index_of(self, card_id: str) -> int | None:
        for index, card in enumerate(self._cards):
            if card.id == card_id:
                return index
        return None
