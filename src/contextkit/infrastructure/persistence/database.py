"""Database management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

# Registers tables with SQLModel metadata
from contextkit.infrastructure.persistence import models as _models  # noqa: F401
from contextkit.infrastructure.persistence.exceptions import DatabaseError

MEMORY_DATABASE = ":memory:"


class DatabaseManager:
    """データベース管理

    プロンプトカードを保存する SQLite データベースのエンジンとセッションを管理する。
    """

    def __init__(self, database_path: str) -> None:
        """初期化

        Args:
            database_path: SQLite データベースファイルのパス
                          ":memory:" を指定するとインメモリDBを使用
        """
        self._database_path = database_path
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def database_path(self) -> str:
        return self._database_path

    def get_engine(self) -> AsyncEngine:
        """SQLAlchemy 非同期エンジンを取得する

        初回呼び出し時に生成してキャッシュする。ファイル DB の場合は
        親ディレクトリも作成する。
        """
        if self._engine is not None:
            return self._engine

        if self._database_path == MEMORY_DATABASE:
            url = "sqlite+aiosqlite:///:memory:"
        else:
            Path(self._database_path).parent.mkdir(parents=True, exist_ok=True)
            url = f"sqlite+aiosqlite:///{self._database_path}"

        self._engine = create_async_engine(url)
        self._session_factory = async_sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False
        )
        return self._engine

    async def create_tables(self) -> None:
        """テーブルを作成する（既存のテーブルはそのまま）

        Raises:
            DatabaseError: テーブル作成に失敗した場合
        """
        engine = self.get_engine()
        try:
            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Failed to create tables in {self._database_path}: {e}"
            ) from e

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """セッションを取得する（async context manager）"""
        self.get_engine()
        assert self._session_factory is not None
        async with self._session_factory() as session:
            yield session

    async def close(self) -> None:
        """エンジンを破棄する"""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
