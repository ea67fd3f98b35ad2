"""YAML設定ファイルの読み込みと環境変数展開"""

import os
import re
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from contextkit.config.models import (
    AIConfig,
    CompressionOptions,
    Config,
    LoggingConfig,
    PromptCardSeed,
    StorageConfig,
)

PROMPT_CARD_PLACEMENTS = ("system", "after_system", "user_end")
FILE_CONTENT_MODES = ("merged", "separate")


class ConfigError(Exception):
    """設定関連の基底例外"""


class ConfigValidationError(ConfigError):
    """設定値のバリデーションエラー"""


class EnvironmentVariableError(ConfigError):
    """環境変数が見つからないエラー"""


# 環境変数パターン: ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_env_vars(value: str) -> str:
    """文字列中の ${VAR_NAME} を環境変数の値に置換する

    Args:
        value: 置換対象の文字列

    Returns:
        環境変数が展開された文字列

    Raises:
        EnvironmentVariableError: 環境変数が未設定
    """
    if not value:
        return value

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            raise EnvironmentVariableError(
                f"Environment variable '{var_name}' is not set"
            )
        return env_value

    return ENV_VAR_PATTERN.sub(replace_var, value)


def _expand_recursive(data: Any) -> Any:
    """データ構造を再帰的に走査し、文字列中の環境変数を展開する"""
    if isinstance(data, dict):
        return {key: _expand_recursive(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_recursive(item) for item in data]
    elif isinstance(data, str):
        return expand_env_vars(data)
    else:
        return data


def _validate_required_field(data: dict[str, Any], field: str, parent: str = "") -> Any:
    """必須フィールドの存在を検証する

    Args:
        data: 検証対象のdict
        field: フィールド名
        parent: 親フィールド名（エラーメッセージ用）

    Returns:
        フィールドの値

    Raises:
        ConfigValidationError: フィールドが存在しない
    """
    if field not in data or data[field] is None:
        full_path = f"{parent}.{field}" if parent else field
        raise ConfigValidationError(f"Required field '{full_path}' is missing")
    return data[field]


def _parse_compression_options(data: dict[str, Any] | None) -> CompressionOptions | None:
    """圧縮オプションを読み込む

    未知のキーはエラーにする。

    Raises:
        ConfigValidationError: 未知のキーがある
    """
    if data is None:
        return None
    known = {f.name for f in fields(CompressionOptions)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigValidationError(
            f"Unknown compression option(s): {', '.join(unknown)}"
        )
    return CompressionOptions(**data)


def _parse_ai_config(data: dict[str, Any]) -> AIConfig:
    """ai セクションを AIConfig に変換する"""
    file_content_mode = data.get("file_content_mode", "merged")
    if file_content_mode not in FILE_CONTENT_MODES:
        raise ConfigValidationError(
            f"ai.file_content_mode must be one of {FILE_CONTENT_MODES}, "
            f"got '{file_content_mode}'"
        )

    history_limit = data.get("history_limit", 0)
    if (
        not isinstance(history_limit, int)
        or isinstance(history_limit, bool)
        or history_limit < 0
    ):
        raise ConfigValidationError(
            "ai.history_limit must be a non-negative integer"
        )

    enable_compression = data.get("enable_compression", False)
    if not isinstance(enable_compression, bool):
        raise ConfigValidationError(
            f"ai.enable_compression must be a boolean, got '{enable_compression}'"
        )

    file_content_priority = data.get("file_content_priority", 10)
    if not isinstance(file_content_priority, int) or isinstance(
        file_content_priority, bool
    ):
        raise ConfigValidationError(
            f"ai.file_content_priority must be an integer, "
            f"got '{file_content_priority}'"
        )

    return AIConfig(
        system_prompt=data.get("system_prompt") or "",
        history_limit=history_limit,
        enable_compression=enable_compression,
        compression_options=_parse_compression_options(data.get("compression")),
        file_content_mode=file_content_mode,
        file_content_priority=file_content_priority,
    )


def _parse_prompt_cards(items: list[dict[str, Any]] | None) -> list[PromptCardSeed]:
    """prompt_cards セクションを読み込む"""
    seeds: list[PromptCardSeed] = []
    for index, item in enumerate(items or []):
        parent = f"prompt_cards[{index}]"
        placement = item.get("placement", "system")
        if placement not in PROMPT_CARD_PLACEMENTS:
            raise ConfigValidationError(
                f"{parent}.placement must be one of {PROMPT_CARD_PLACEMENTS}, "
                f"got '{placement}'"
            )
        seeds.append(
            PromptCardSeed(
                title=_validate_required_field(item, "title", parent),
                content=_validate_required_field(item, "content", parent),
                placement=placement,
                enabled=item.get("enabled", True),
                priority=item.get("priority", 5),
            )
        )
    return seeds


def load_config(path: str | Path) -> Config:
    """設定ファイルを読み込む

    Args:
        path: config.yaml のパス

    Returns:
        Config オブジェクト

    Raises:
        FileNotFoundError: ファイルが存在しない
        ConfigValidationError: 必須項目が欠落、または値が不正
        EnvironmentVariableError: 環境変数が未設定
        yaml.YAMLError: YAML構文エラー
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f)

    if not isinstance(raw_data, dict):
        raise ConfigValidationError("Config file must contain a mapping")

    # 環境変数を展開
    data = _expand_recursive(raw_data)

    # 必須セクションの検証
    ai_data = _validate_required_field(data, "ai")
    storage_data = _validate_required_field(data, "storage")

    ai = _parse_ai_config(ai_data)
    storage = StorageConfig(
        database_path=_validate_required_field(
            storage_data, "database_path", "storage"
        ),
    )
    prompt_cards = _parse_prompt_cards(data.get("prompt_cards"))

    # LoggingConfig (optional)
    logging_config: LoggingConfig | None = None
    logging_data = data.get("logging")
    if logging_data:
        logging_config = LoggingConfig(
            level=logging_data.get("level", "INFO"),
            format=logging_data.get(
                "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
            loggers=logging_data.get("loggers"),
            debug_messages=logging_data.get("debug_messages", False),
        )

    return Config(
        ai=ai, storage=storage, prompt_cards=prompt_cards, logging=logging_config
    )
