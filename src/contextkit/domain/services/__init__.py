"""Domain services."""

from contextkit.domain.services.context_engine import ContextEngine
from contextkit.domain.services.message_editor import MessageEditor
from contextkit.domain.services.message_operators import (
    MessageOperator,
    TempContextPlacement,
    add_file_context,
    add_summary_context,
    add_temporary_context,
    append_system_prompt,
    compose,
    compress_messages,
    default_temp_formatter,
    ensure_system_message,
    inject_system_prompt,
    limit_history,
    merge_consecutive_same_role,
    no_formatter,
    remove_empty_messages,
    when,
)
from contextkit.domain.services.prompt_cards import PromptCardSource
from contextkit.domain.services.summarizer import SummarizePlan, build_summarize_plan
from contextkit.domain.services.system_prompt import (
    SystemPromptController,
    SystemPromptTransformer,
)
from contextkit.domain.services.text_compressor import (
    CompressionStats,
    TextCompressor,
    compress_text,
    get_compression_stats,
)

__all__ = [
    "CompressionStats",
    "ContextEngine",
    "MessageEditor",
    "MessageOperator",
    "PromptCardSource",
    "SummarizePlan",
    "SystemPromptController",
    "SystemPromptTransformer",
    "TempContextPlacement",
    "TextCompressor",
    "add_file_context",
    "add_summary_context",
    "add_temporary_context",
    "append_system_prompt",
    "build_summarize_plan",
    "compose",
    "compress_messages",
    "compress_text",
    "default_temp_formatter",
    "ensure_system_message",
    "get_compression_stats",
    "inject_system_prompt",
    "limit_history",
    "merge_consecutive_same_role",
    "no_formatter",
    "remove_empty_messages",
    "when",
]
