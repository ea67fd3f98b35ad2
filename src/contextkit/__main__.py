"""Preview CLI: assemble a request from a history file and print it."""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any

from contextkit.application.services import PromptCardManager
from contextkit.config import AIConfig, ConfigError, LoggingConfig, load_config
from contextkit.domain.entities import (
    ConversationTree,
    FlatMessage,
    RequestMessage,
    get_conversation_history,
)
from contextkit.domain.services import ContextEngine, get_compression_stats
from contextkit.infrastructure.persistence import (
    DatabaseManager,
    PersistenceError,
    SQLitePromptCardRepository,
)
from contextkit.infrastructure.rendering import render_preview

# Default logging for early startup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class HistoryFormatError(Exception):
    """History file could not be interpreted."""


def configure_logging(config: LoggingConfig | None) -> None:
    """Configure logging based on config.

    Args:
        config: Logging configuration. If None, uses defaults.
    """
    if config is None:
        return

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    if root_logger.handlers:
        formatter = logging.Formatter(config.format)
        for handler in root_logger.handlers:
            handler.setFormatter(formatter)

    if config.loggers:
        for logger_name, logger_level in config.loggers.items():
            logging.getLogger(logger_name).setLevel(
                getattr(logging, logger_level.upper(), logging.INFO)
            )
            logger.debug(
                "Set logger '%s' to level %s", logger_name, logger_level.upper()
            )


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as e:
        raise HistoryFormatError(f"Invalid timestamp: {value!r}") from e


def _to_flat_message(item: Any) -> FlatMessage:
    if not isinstance(item, dict) or "role" not in item or "content" not in item:
        raise HistoryFormatError(f"Invalid message entry: {item!r}")
    parent_id = item.get("parent_id")
    return FlatMessage(
        id=str(item.get("id", "")),
        role=str(item["role"]),
        content=str(item["content"]),
        parent_id=str(parent_id) if parent_id is not None else None,
        timestamp=_parse_timestamp(item.get("timestamp")),
    )


def parse_history(data: Any) -> list[FlatMessage]:
    """Interpret decoded history JSON.

    Accepts either a list of message objects (oldest first) or a tree
    object ``{"messages": [...]}`` with an ``active_path`` list of IDs or a
    ``leaf_id`` whose parent chain is followed.

    Raises:
        HistoryFormatError: If the structure is not recognized.
    """
    if isinstance(data, list):
        return [_to_flat_message(item) for item in data]
    if isinstance(data, dict) and "messages" in data:
        messages = [_to_flat_message(item) for item in data["messages"]]
        by_id = {m.id: m for m in messages}
        if "leaf_id" in data:
            return get_conversation_history(str(data["leaf_id"]), by_id)
        active_path = data.get("active_path")
        if active_path is None:
            return messages
        tree = ConversationTree(
            flat_messages=by_id,
            active_path=[str(node_id) for node_id in active_path],
        )
        return tree.active_history()
    raise HistoryFormatError("History must be a list or an object with 'messages'")


def load_history(path: Path) -> list[FlatMessage]:
    """Read and parse a history JSON file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise HistoryFormatError(f"Invalid JSON in {path}: {e}") from e
    return parse_history(data)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contextkit",
        description="Assemble request messages from a conversation history",
    )
    parser.add_argument("--config", type=Path, default=Path("config.yaml"))
    parser.add_argument("--history", type=Path, required=True)
    parser.add_argument(
        "--temp-file",
        type=Path,
        action="append",
        default=[],
        help="Temporary content file (repeatable)",
    )
    parser.add_argument(
        "--placement", choices=("append", "after_system"), default="append"
    )
    parser.add_argument(
        "--compress",
        action="store_true",
        help="Enable compression regardless of the config",
    )
    return parser


async def main(argv: list[str] | None = None) -> None:
    """Run the preview."""
    args = build_parser().parse_args(argv)

    if not args.config.exists():
        logger.error("%s not found", args.config)
        sys.exit(1)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error("Failed to load config: %s", e)
        sys.exit(1)

    configure_logging(config.logging)
    logger.debug("Config: %s", config.to_summary())

    try:
        history = load_history(args.history)
        temp_contents = [p.read_text(encoding="utf-8") for p in args.temp_file]
    except (OSError, HistoryFormatError) as e:
        logger.error("Failed to read input: %s", e)
        sys.exit(1)

    db_manager = DatabaseManager(config.storage.database_path)
    try:
        await db_manager.create_tables()
        manager = PromptCardManager(
            SQLitePromptCardRepository(db_manager.get_session),
            default_cards=config.prompt_cards,
        )
        await manager.initialize()
    except PersistenceError as e:
        logger.error("Failed to initialize card store: %s", e)
        sys.exit(1)
    finally:
        # Cards stay cached in the manager
        await db_manager.close()

    debug_messages = bool(config.logging and config.logging.debug_messages)
    engine = ContextEngine(card_source=manager, debug_messages=debug_messages)

    ai_config = config.ai
    if args.compress:
        ai_config = replace(ai_config, enable_compression=True)

    def build(cfg: AIConfig) -> list[RequestMessage]:
        return engine.build_request_messages(
            history,
            cfg,
            temp_placement=args.placement,
            temp_content_list=temp_contents or None,
        )

    messages = build(ai_config)
    stats = None
    if ai_config.enable_compression:
        raw = build(replace(ai_config, enable_compression=False))
        stats = [
            get_compression_stats(before.content, after.content)
            for before, after in zip(raw, messages)
        ]

    print(render_preview(messages, stats, summary=config.to_summary()))


def run() -> None:
    """Run the async main function."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    run()
