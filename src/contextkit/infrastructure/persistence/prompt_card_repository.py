"""SQLite implementation of PromptCardRepository."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from contextkit.domain.entities.prompt_card import PromptCard
from contextkit.infrastructure.persistence.datetime_utils import normalize_to_utc
from contextkit.infrastructure.persistence.models import PromptCardModel


class SQLitePromptCardRepository:
    """SQLite 版 PromptCardRepository 実装"""

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        """初期化

        Args:
            session_factory: 非同期セッション生成関数
        """
        self._session_factory = session_factory

    async def save(self, card: PromptCard) -> None:
        """カードを保存（upsert）

        Args:
            card: 保存するカード
        """
        async with self._session_factory() as session:
            model = PromptCardModel(
                id=card.id,
                title=card.title,
                content=card.content,
                placement=card.placement,
                enabled=card.enabled,
                order=card.order,
                priority=card.priority,
                created_at=card.created_at,
                updated_at=card.updated_at,
            )
            await session.merge(model)
            await session.commit()

    async def find_by_id(self, card_id: str) -> PromptCard | None:
        """ID でカードを検索

        Args:
            card_id: カードの ID

        Returns:
            見つかったカード、または None
        """
        async with self._session_factory() as session:
            model = await session.get(PromptCardModel, card_id)
            if model is None:
                return None
            return self._to_entity(model)

    async def find_all(self) -> list[PromptCard]:
        """全カードを order 昇順で取得"""
        async with self._session_factory() as session:
            stmt = select(PromptCardModel).order_by(
                PromptCardModel.order,  # type: ignore[arg-type]
                PromptCardModel.created_at,  # type: ignore[arg-type]
            )
            result = await session.exec(stmt)
            return [self._to_entity(model) for model in result.all()]

    async def delete(self, card_id: str) -> bool:
        """カードを削除

        Returns:
            削除成功の場合 True、カードが存在しない場合 False
        """
        async with self._session_factory() as session:
            stmt = delete(PromptCardModel).where(
                PromptCardModel.id == card_id  # type: ignore[arg-type]
            )
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount > 0  # type: ignore[union-attr]

    async def delete_all(self) -> int:
        """全カードを削除

        Returns:
            削除した件数
        """
        async with self._session_factory() as session:
            result = await session.execute(delete(PromptCardModel))
            await session.commit()
            return result.rowcount or 0  # type: ignore[union-attr]

    def _to_entity(self, model: PromptCardModel) -> PromptCard:
        return PromptCard(
            id=model.id,
            title=model.title,
            content=model.content,
            placement=model.placement,  # type: ignore[arg-type]
            enabled=model.enabled,
            order=model.order,
            priority=model.priority,
            created_at=normalize_to_utc(model.created_at),
            updated_at=normalize_to_utc(model.updated_at),
        )
