"""Composable message operators.

An operator is a function MessageEditor -> MessageEditor. Operators are
combined with compose() or applied one after another; each one returns a
new editor and leaves its input untouched.
"""

from collections.abc import Callable
from typing import Literal

from contextkit.config.models import CompressionOptions
from contextkit.domain.entities.message import RequestMessage
from contextkit.domain.services.message_editor import MessageEditor
from contextkit.domain.services.text_compressor import compress_text

MessageOperator = Callable[[MessageEditor], MessageEditor]
TempContentFormatter = Callable[[str], str]
TempContextPlacement = Literal["append", "after_system"]

DEFAULT_SYSTEM_PROMPT = "你是一个有帮助的AI助手。"

CONTEXT_LABEL = "【上下文】"
FILE_CONTENT_LABEL = "【文件内容】"
SUMMARY_LABEL = "【对话历史摘要】"

MESSAGE_SEPARATOR = "\n\n"


def default_temp_formatter(content: str) -> str:
    """Prefix temporary content with the context label."""
    return f"{CONTEXT_LABEL}\n{content}"


def no_formatter(content: str) -> str:
    return content


def _is_system(message: RequestMessage, _index: int) -> bool:
    return message.role == "system"


def _is_not_system(message: RequestMessage, _index: int) -> bool:
    return message.role != "system"


def _is_user(message: RequestMessage, _index: int) -> bool:
    return message.role == "user"


def after_system_position(editor: MessageEditor) -> int:
    """Index just past the leading system block (end if all are system)."""
    index = editor.find_index(_is_not_system)
    return index if index >= 0 else editor.count()


def insert_after_system(editor: MessageEditor, message: RequestMessage) -> MessageEditor:
    """Insert message right after the leading system messages."""
    return editor.insert(message, after_system_position(editor))


def append_to_last_user(editor: MessageEditor, suffix: str) -> MessageEditor:
    """Append suffix to the last user message; no-op without one."""
    index = editor.find_last_index(_is_user)
    if index < 0:
        return editor
    return editor.modify_at(index, lambda m: m.with_content(m.content + suffix))


def inject_system_prompt(system_prompt: str, position: int = 0) -> MessageOperator:
    """Replace all system messages with a single one at position.

    A blank prompt leaves the editor unchanged.
    """

    def operator(editor: MessageEditor) -> MessageEditor:
        if not system_prompt.strip():
            return editor
        return editor.remove_where(_is_system).insert(
            RequestMessage(role="system", content=system_prompt), position
        )

    return operator


def append_system_prompt(system_prompt: str) -> MessageOperator:
    """Append to the first system message, or insert one at the front."""

    def operator(editor: MessageEditor) -> MessageEditor:
        if not system_prompt.strip():
            return editor
        index = editor.find_index(_is_system)
        if index >= 0:
            return editor.modify_at(
                index,
                lambda m: m.with_content(m.content + MESSAGE_SEPARATOR + system_prompt),
            )
        return editor.insert(RequestMessage(role="system", content=system_prompt), 0)

    return operator


def add_temporary_context(
    temp_content: str | None,
    placement: TempContextPlacement = "append",
    formatter: TempContentFormatter = default_temp_formatter,
) -> MessageOperator:
    """Add temporary context for one request.

    Args:
        temp_content: Context text. Blank content is ignored.
        placement:
            - "append": appended raw to the last user message (no-op
              without one); the formatter is not used.
            - "after_system": formatted and inserted as a new user message
              right after the leading system messages.
        formatter: Applied to the content for "after_system" only.
    """

    def operator(editor: MessageEditor) -> MessageEditor:
        trimmed = (temp_content or "").strip()
        if not trimmed:
            return editor
        if placement == "after_system":
            return insert_after_system(
                editor, RequestMessage(role="user", content=formatter(trimmed))
            )
        if placement == "append":
            return append_to_last_user(editor, MESSAGE_SEPARATOR + trimmed)
        return editor

    return operator


def limit_history(limit: int) -> MessageOperator:
    """Keep the last limit non-system messages (0 keeps everything)."""

    def operator(editor: MessageEditor) -> MessageEditor:
        return editor.limit(limit)

    return operator


def add_file_context(
    files_content: str | None,
    placement: TempContextPlacement = "after_system",
) -> MessageOperator:
    """Add file content under the file label."""

    def label(content: str) -> str:
        return f"{FILE_CONTENT_LABEL}\n{content}"

    def operator(editor: MessageEditor) -> MessageEditor:
        trimmed = (files_content or "").strip()
        if not trimmed:
            return editor
        if placement == "after_system":
            return insert_after_system(
                editor, RequestMessage(role="user", content=label(trimmed))
            )
        return append_to_last_user(editor, MESSAGE_SEPARATOR + label(trimmed))

    return operator


def add_summary_context(summary_content: str | None) -> MessageOperator:
    """Insert a conversation summary right after the system messages."""
    return add_temporary_context(
        summary_content,
        "after_system",
        lambda content: f"{SUMMARY_LABEL}\n{content}",
    )


def ensure_system_message(default_prompt: str = DEFAULT_SYSTEM_PROMPT) -> MessageOperator:
    """Insert default_prompt at the front if there is no system message."""

    def operator(editor: MessageEditor) -> MessageEditor:
        if editor.find_index(_is_system) >= 0:
            return editor
        return editor.insert(RequestMessage(role="system", content=default_prompt), 0)

    return operator


def remove_empty_messages() -> MessageOperator:
    """Drop messages whose content is empty or whitespace only."""

    def operator(editor: MessageEditor) -> MessageEditor:
        return editor.remove_where(lambda m, _i: not m.content.strip())

    return operator


def merge_consecutive_same_role() -> MessageOperator:
    """Join each message into the previous one when their roles match."""

    def merge(messages: list[RequestMessage]) -> list[RequestMessage]:
        result: list[RequestMessage] = []
        for message in messages:
            if result and result[-1].role == message.role:
                previous = result[-1]
                result[-1] = previous.with_content(
                    previous.content + MESSAGE_SEPARATOR + message.content
                )
            else:
                result.append(message)
        return result

    def operator(editor: MessageEditor) -> MessageEditor:
        return editor.transform(merge)

    return operator


def compress_messages(options: CompressionOptions | None = None) -> MessageOperator:
    """Compress every message's content, keeping roles and order."""

    def operator(editor: MessageEditor) -> MessageEditor:
        return editor.transform(
            lambda messages: [
                m.with_content(compress_text(m.content, options)) for m in messages
            ]
        )

    return operator


def compose(*operators: MessageOperator) -> MessageOperator:
    """Chain operators left to right."""

    def operator(editor: MessageEditor) -> MessageEditor:
        for op in operators:
            editor = op(editor)
        return editor

    return operator


def when(condition: bool, operator: MessageOperator) -> MessageOperator:
    """Apply operator only if condition is true."""

    def conditional(editor: MessageEditor) -> MessageEditor:
        return operator(editor) if condition else editor

    return conditional
