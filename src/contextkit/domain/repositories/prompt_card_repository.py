"""PromptCardRepository Protocol."""

from typing import Protocol

from contextkit.domain.entities.prompt_card import PromptCard


class PromptCardRepository(Protocol):
    """プロンプトカードリポジトリ"""

    async def save(self, card: PromptCard) -> None:
        """カードを保存（upsert）

        同じ ID のカードが存在する場合は更新する。

        Args:
            card: 保存するカード
        """
        ...

    async def find_by_id(self, card_id: str) -> PromptCard | None:
        """ID でカードを検索

        Args:
            card_id: カードの ID

        Returns:
            見つかったカード、または None
        """
        ...

    async def find_all(self) -> list[PromptCard]:
        """全カードを取得

        order 昇順でソート。

        Returns:
            カードのリスト
        """
        ...

    async def delete(self, card_id: str) -> bool:
        """カードを削除

        Args:
            card_id: 削除するカードの ID

        Returns:
            削除成功の場合 True、カードが存在しない場合 False
        """
        ...

    async def delete_all(self) -> int:
        """全カードを削除

        Returns:
            削除した件数
        """
        ...
