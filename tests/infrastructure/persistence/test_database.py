"""Tests for DatabaseManager."""

from pathlib import Path

import pytest
from sqlalchemy import inspect

from contextkit.application.services import PromptCardManager
from contextkit.infrastructure.persistence import (
    DatabaseManager,
    SQLitePromptCardRepository,
)


class TestDatabaseManager:
    """DatabaseManager tests."""

    def test_get_engine_creates_parent_directory(self, tmp_path: Path) -> None:
        """Test that parent directory is created if not exists."""
        db_path = tmp_path / "subdir" / "nested" / "test.db"
        manager = DatabaseManager(str(db_path))

        engine = manager.get_engine()

        assert db_path.parent.exists()
        assert "sqlite+aiosqlite" in str(engine.url)

    def test_get_engine_cached(self, tmp_path: Path) -> None:
        """Test that the engine is created once."""
        manager = DatabaseManager(str(tmp_path / "test.db"))

        assert manager.get_engine() is manager.get_engine()

    async def test_create_tables(self, tmp_path: Path) -> None:
        """Test table creation, including a second run."""
        manager = DatabaseManager(str(tmp_path / "test.db"))

        await manager.create_tables()
        await manager.create_tables()

        async with manager.get_engine().connect() as conn:
            tables = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_table_names()
            )
        await manager.close()

        assert "prompt_cards" in tables

    async def test_close(self, tmp_path: Path) -> None:
        """Test that close allows a fresh engine afterwards."""
        manager = DatabaseManager(str(tmp_path / "test.db"))
        engine = manager.get_engine()

        await manager.close()

        assert manager.get_engine() is not engine
        await manager.close()


class TestPersistedCards:
    """Cards survive a new manager on the same file."""

    @pytest.mark.parametrize("placement", ["system", "after_system", "user_end"])
    async def test_roundtrip_through_file(
        self, tmp_path: Path, placement: str
    ) -> None:
        db_path = str(tmp_path / "cards.db")

        first_db = DatabaseManager(db_path)
        await first_db.create_tables()
        first = PromptCardManager(SQLitePromptCardRepository(first_db.get_session))
        created = await first.create_card(
            "t", "content", placement=placement, priority=12  # type: ignore[arg-type]
        )
        await first_db.close()

        second_db = DatabaseManager(db_path)
        second = PromptCardManager(SQLitePromptCardRepository(second_db.get_session))
        await second.initialize()
        await second_db.close()

        assert second.get_all_cards() == [created]
