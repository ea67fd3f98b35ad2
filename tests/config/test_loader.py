"""設定ローダーのテスト"""

import os
from pathlib import Path
from typing import Generator

import pytest
import yaml

from contextkit.config import (
    AIConfig,
    CompressionOptions,
    Config,
    ConfigValidationError,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
)


@pytest.fixture
def env_vars() -> Generator[dict[str, str], None, None]:
    """テスト用環境変数を設定・クリーンアップ"""
    test_vars = {
        "TEST_DATA_DIR": "/tmp/contextkit-test",
        "TEST_VAR_A": "valueA",
        "TEST_VAR_B": "valueB",
    }
    for key, value in test_vars.items():
        os.environ[key] = value
    yield test_vars
    for key in test_vars:
        os.environ.pop(key, None)


def write_config(tmp_path: Path, content: str) -> Path:
    """設定ファイルを書き出す"""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(content, encoding="utf-8")
    return config_file


MINIMAL_CONFIG = """
ai:
  system_prompt: "You are helpful."
storage:
  database_path: ./data/contextkit.db
"""


class TestExpandEnvVars:
    """expand_env_vars関数のテスト"""

    def test_single_variable(self, env_vars: dict[str, str]) -> None:
        """単一の変数を展開できる"""
        assert expand_env_vars("${TEST_VAR_A}") == "valueA"

    def test_multiple_variables(self, env_vars: dict[str, str]) -> None:
        """複数の変数を展開できる"""
        assert expand_env_vars("${TEST_VAR_A}_${TEST_VAR_B}") == "valueA_valueB"

    def test_no_variables(self) -> None:
        """変数がない場合はそのまま返す"""
        assert expand_env_vars("plain text") == "plain text"

    def test_undefined_variable(self) -> None:
        """未設定の変数でEnvironmentVariableErrorが発生"""
        with pytest.raises(EnvironmentVariableError) as exc_info:
            expand_env_vars("${UNDEFINED_VAR_12345}")
        assert "UNDEFINED_VAR_12345" in str(exc_info.value)


class TestLoadConfig:
    """load_config関数のテスト"""

    def test_load_minimal_config(self, tmp_path: Path) -> None:
        """最小構成の設定ファイルを読み込める"""
        config = load_config(write_config(tmp_path, MINIMAL_CONFIG))

        assert isinstance(config, Config)
        assert config.ai == AIConfig(system_prompt="You are helpful.")
        assert config.storage.database_path == "./data/contextkit.db"
        assert config.prompt_cards == []
        assert config.logging is None

    def test_load_full_config(self, tmp_path: Path, env_vars: dict[str, str]) -> None:
        """全項目を含む設定ファイルを読み込める"""
        content = """
ai:
  system_prompt: "你是AI写作助手"
  history_limit: 40
  enable_compression: true
  compression:
    compress_newlines: 2
    remove_emojis: true
  file_content_mode: separate
  file_content_priority: 7
storage:
  database_path: ${TEST_DATA_DIR}/cards.db
prompt_cards:
  - title: 文风
    content: 简洁
  - title: 世界观
    content: 蒸汽朋克
    placement: after_system
    priority: 15
    enabled: false
logging:
  level: DEBUG
  loggers:
    contextkit.domain: WARNING
  debug_messages: true
"""
        config = load_config(write_config(tmp_path, content))

        assert config.ai.history_limit == 40
        assert config.ai.enable_compression is True
        assert config.ai.compression_options == CompressionOptions(
            compress_newlines=2, remove_emojis=True
        )
        assert config.ai.file_content_mode == "separate"
        assert config.ai.file_content_priority == 7
        assert config.storage.database_path == "/tmp/contextkit-test/cards.db"

        assert len(config.prompt_cards) == 2
        assert config.prompt_cards[0].placement == "system"
        assert config.prompt_cards[0].priority == 5
        assert config.prompt_cards[1].placement == "after_system"
        assert config.prompt_cards[1].priority == 15
        assert config.prompt_cards[1].enabled is False

        assert config.logging is not None
        assert config.logging.level == "DEBUG"
        assert config.logging.loggers == {"contextkit.domain": "WARNING"}
        assert config.logging.debug_messages is True

    def test_file_not_found(self, tmp_path: Path) -> None:
        """存在しないファイルでFileNotFoundError"""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_missing_ai_section(self, tmp_path: Path) -> None:
        """ai セクションがない場合はエラー"""
        content = """
storage:
  database_path: ./data.db
"""
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(write_config(tmp_path, content))
        assert "ai" in str(exc_info.value)

    def test_missing_database_path(self, tmp_path: Path) -> None:
        """storage.database_path がない場合はエラー"""
        content = """
ai:
  system_prompt: x
storage: {}
"""
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(write_config(tmp_path, content))
        assert "storage.database_path" in str(exc_info.value)

    def test_invalid_file_content_mode(self, tmp_path: Path) -> None:
        """不正な file_content_mode はエラー"""
        content = MINIMAL_CONFIG.replace(
            'system_prompt: "You are helpful."',
            'system_prompt: "x"\n  file_content_mode: combined',
        )
        with pytest.raises(ConfigValidationError):
            load_config(write_config(tmp_path, content))

    def test_negative_history_limit(self, tmp_path: Path) -> None:
        """負の history_limit はエラー"""
        content = MINIMAL_CONFIG.replace(
            'system_prompt: "You are helpful."',
            'system_prompt: "x"\n  history_limit: -1',
        )
        with pytest.raises(ConfigValidationError):
            load_config(write_config(tmp_path, content))

    def test_boolean_history_limit(self, tmp_path: Path) -> None:
        """真偽値の history_limit はエラー"""
        content = MINIMAL_CONFIG.replace(
            'system_prompt: "You are helpful."',
            'system_prompt: "x"\n  history_limit: true',
        )
        with pytest.raises(ConfigValidationError):
            load_config(write_config(tmp_path, content))

    def test_string_file_content_priority(self, tmp_path: Path) -> None:
        """文字列の file_content_priority はエラー"""
        content = MINIMAL_CONFIG.replace(
            'system_prompt: "You are helpful."',
            'system_prompt: "x"\n  file_content_priority: "10"',
        )
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(write_config(tmp_path, content))
        assert "ai.file_content_priority" in str(exc_info.value)

    def test_string_enable_compression(self, tmp_path: Path) -> None:
        """文字列の enable_compression はエラー"""
        content = MINIMAL_CONFIG.replace(
            'system_prompt: "You are helpful."',
            'system_prompt: "x"\n  enable_compression: "false"',
        )
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(write_config(tmp_path, content))
        assert "ai.enable_compression" in str(exc_info.value)

    def test_unknown_compression_option(self, tmp_path: Path) -> None:
        """未知の圧縮オプションはエラー"""
        content = MINIMAL_CONFIG.replace(
            'system_prompt: "You are helpful."',
            'system_prompt: "x"\n  compression:\n    remove_markdwn: true',
        )
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(write_config(tmp_path, content))
        assert "remove_markdwn" in str(exc_info.value)

    def test_invalid_card_placement(self, tmp_path: Path) -> None:
        """不正な placement のカードはエラー"""
        content = MINIMAL_CONFIG + """
prompt_cards:
  - title: t
    content: c
    placement: footer
"""
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(write_config(tmp_path, content))
        assert "prompt_cards[0].placement" in str(exc_info.value)

    def test_card_missing_content(self, tmp_path: Path) -> None:
        """content のないカードはエラー"""
        content = MINIMAL_CONFIG + """
prompt_cards:
  - title: t
"""
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(write_config(tmp_path, content))
        assert "prompt_cards[0].content" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """YAML構文エラー"""
        with pytest.raises(yaml.YAMLError):
            load_config(write_config(tmp_path, "ai: [unclosed"))

    def test_undefined_env_var_in_config(self, tmp_path: Path) -> None:
        """設定内の未定義環境変数はエラー"""
        content = """
ai:
  system_prompt: x
storage:
  database_path: ${UNDEFINED_DATA_DIR_98765}/db
"""
        with pytest.raises(EnvironmentVariableError):
            load_config(write_config(tmp_path, content))


class TestConfigSummary:
    """Config.to_summary のテスト"""

    def test_summary_excludes_prompt_text(self, tmp_path: Path) -> None:
        """概要にはプロンプト本文を含めない"""
        config = load_config(write_config(tmp_path, MINIMAL_CONFIG))

        summary = config.to_summary()

        assert summary["database_path"] == "./data/contextkit.db"
        assert summary["prompt_cards"] == 0
        assert "You are helpful." not in summary.values()
