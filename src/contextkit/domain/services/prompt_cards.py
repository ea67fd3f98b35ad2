"""Prompt card placement rules.

Cards are grouped by placement:

- system: joined and appended to the system message (created if missing).
- user_end: joined and appended to the last user message.
- after_system: inserted after the system block together with temporary
  file content, ordered by priority (see insert_prioritized_context).
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from contextkit.config.models import FileContentMode
from contextkit.domain.entities.message import RequestMessage
from contextkit.domain.entities.prompt_card import PromptCard
from contextkit.domain.services.message_editor import MessageEditor
from contextkit.domain.services.message_operators import (
    MESSAGE_SEPARATOR,
    MessageOperator,
    TempContentFormatter,
    after_system_position,
    append_to_last_user,
    default_temp_formatter,
)

MERGED_FILE_SEPARATOR = "\n\n---\n\n"


class PromptCardSource(Protocol):
    """Read access to the prompt card registry."""

    def get_enabled_cards(self) -> list[PromptCard]:
        """Return enabled cards sorted by order ascending."""
        ...


@dataclass
class PriorityBucket:
    """Content competing for after_system insertion at one priority."""

    files: list[str] = field(default_factory=list)
    cards: list[str] = field(default_factory=list)


def cards_for_placement(cards: Iterable[PromptCard], placement: str) -> list[str]:
    """Non-blank contents of cards with the given placement, in input order."""
    return [
        card.content
        for card in cards
        if card.placement == placement and card.content.strip()
    ]


def collect_file_contents(
    temp_content: str | None,
    temp_content_list: Sequence[str] | None,
    mode: FileContentMode,
) -> list[str]:
    """Turn temporary content into the entries inserted as file context.

    With a non-empty list, "separate" yields each non-blank item and
    "merged" yields the non-blank items joined into one entry. Without a
    list, a non-blank temp_content is the single entry.
    """
    if temp_content_list:
        items = [item for item in temp_content_list if item.strip()]
        if mode == "separate":
            return items
        return [MERGED_FILE_SEPARATOR.join(items)] if items else []
    if temp_content and temp_content.strip():
        return [temp_content]
    return []


def build_priority_buckets(
    file_contents: Sequence[str],
    file_priority: int,
    cards: Iterable[PromptCard],
) -> dict[int, PriorityBucket]:
    """Group file contents and after_system cards by priority."""
    buckets: dict[int, PriorityBucket] = {}
    for content in file_contents:
        buckets.setdefault(file_priority, PriorityBucket()).files.append(content)
    for card in cards:
        if card.placement != "after_system" or not card.content.strip():
            continue
        buckets.setdefault(card.priority, PriorityBucket()).cards.append(card.content)
    return buckets


def insert_prioritized_context(
    file_contents: Sequence[str],
    file_priority: int,
    cards: Iterable[PromptCard],
    formatter: TempContentFormatter = default_temp_formatter,
) -> MessageOperator:
    """Insert file content and after_system cards after the system block.

    Buckets go in descending priority. Within a bucket every file entry
    becomes its own formatted user message, followed by one user message
    holding the bucket's cards joined by blank lines. The insertion point
    advances with each message, so the result is contiguous.
    """
    buckets = build_priority_buckets(file_contents, file_priority, cards)

    def operator(editor: MessageEditor) -> MessageEditor:
        position = after_system_position(editor)
        for priority in sorted(buckets, reverse=True):
            bucket = buckets[priority]
            for content in bucket.files:
                message = RequestMessage(role="user", content=formatter(content.strip()))
                editor = editor.insert(message, position)
                position += 1
            if bucket.cards:
                message = RequestMessage(
                    role="user", content=MESSAGE_SEPARATOR.join(bucket.cards)
                )
                editor = editor.insert(message, position)
                position += 1
        return editor

    return operator


def apply_system_cards(cards: Iterable[PromptCard]) -> MessageOperator:
    """Append system-placement cards to the first system message."""
    contents = cards_for_placement(cards, "system")

    def operator(editor: MessageEditor) -> MessageEditor:
        if not contents:
            return editor
        combined = MESSAGE_SEPARATOR.join(contents)
        index = editor.find_index(lambda m, _i: m.role == "system")
        if index >= 0:
            return editor.modify_at(
                index,
                lambda m: m.with_content(m.content + MESSAGE_SEPARATOR + combined),
            )
        return editor.prepend(RequestMessage(role="system", content=combined))

    return operator


def apply_user_end_cards(cards: Iterable[PromptCard]) -> MessageOperator:
    """Append user_end-placement cards to the last user message."""
    contents = cards_for_placement(cards, "user_end")

    def operator(editor: MessageEditor) -> MessageEditor:
        if not contents:
            return editor
        return append_to_last_user(
            editor, MESSAGE_SEPARATOR + MESSAGE_SEPARATOR.join(contents)
        )

    return operator
