"""設定データクラス"""

from dataclasses import dataclass, field
from typing import Any, Literal

FileContentMode = Literal["merged", "separate"]


@dataclass(frozen=True)
class CompressionOptions:
    """テキスト圧縮オプション

    Attributes:
        remove_markdown_styling: Markdown の装飾記号を除去する
        remove_full_width_brackets: 全角括弧・引用符を半角に変換する
        trim_lines: 各行の先頭・末尾の空白を除去する
        remove_extra_whitespace: 行内の連続する空白を1つにまとめる
        remove_punctuation_spaces: 句読点直後の余分な空白を除去する
        compress_newlines: 連続改行の最大数（0 は改行を空白に、負数は無効）
        remove_empty_lines: 空行を除去する
        compress_code_blocks: コードブロック内の行末空白を除去する
        remove_code_block_empty_lines: コードブロック内の空行も除去する
            （remove_empty_lines はコードブロックに影響しない）
        remove_emojis: 絵文字を除去する
        compress_tables: Markdown テーブルのセル内空白を詰める
        normalize_punctuation: 全角句読点を半角に統一する
        merge_repeated_symbols: 連続する同じ記号を1つにまとめる
    """

    remove_markdown_styling: bool = True
    remove_full_width_brackets: bool = True
    trim_lines: bool = True
    remove_extra_whitespace: bool = True
    remove_punctuation_spaces: bool = True
    compress_newlines: int = 1
    remove_empty_lines: bool = True
    compress_code_blocks: bool = True
    remove_code_block_empty_lines: bool = False

    remove_emojis: bool = False
    compress_tables: bool = False
    normalize_punctuation: bool = False
    merge_repeated_symbols: bool = False


@dataclass(frozen=True)
class AIConfig:
    """メッセージ組み立てに使う AI 設定

    Attributes:
        system_prompt: システムプロンプト
        history_limit: 保持する非 system メッセージ数（0 は無制限）
        enable_compression: 最終メッセージを圧縮するか
        compression_options: 圧縮オプション（None ならデフォルト）
        file_content_mode: 一時ファイル内容の挿入モード
        file_content_priority: after_system 挿入時のファイル内容の優先度
    """

    system_prompt: str = ""
    history_limit: int = 0
    enable_compression: bool = False
    compression_options: CompressionOptions | None = None
    file_content_mode: FileContentMode = "merged"
    file_content_priority: int = 10


@dataclass
class StorageConfig:
    """永続化設定"""

    database_path: str


@dataclass
class PromptCardSeed:
    """初回起動時に投入するプロンプトカード"""

    title: str
    content: str
    placement: str = "system"
    enabled: bool = True
    priority: int = 5


@dataclass
class LoggingConfig:
    """ログ設定"""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    loggers: dict[str, str] | None = None
    debug_messages: bool = False


@dataclass
class Config:
    """アプリケーション設定"""

    ai: AIConfig
    storage: StorageConfig
    prompt_cards: list[PromptCardSeed] = field(default_factory=list)
    logging: LoggingConfig | None = None

    def to_summary(self) -> dict[str, Any]:
        """ログ出力用の設定概要（プロンプト本文は含めない）"""
        return {
            "history_limit": self.ai.history_limit,
            "enable_compression": self.ai.enable_compression,
            "file_content_mode": self.ai.file_content_mode,
            "file_content_priority": self.ai.file_content_priority,
            "database_path": self.storage.database_path,
            "prompt_cards": len(self.prompt_cards),
        }
