"""Conversation tree entity."""

from dataclasses import dataclass, field

from contextkit.domain.entities.message import FlatMessage


def get_conversation_history(
    node_id: str, flat_messages: dict[str, FlatMessage]
) -> list[FlatMessage]:
    """Collect the path from the root to a node.

    Follows parent links upward and returns the messages root first.
    Stops at a missing ID, and at a repeated ID so that a corrupted
    parent chain cannot loop forever.

    Args:
        node_id: ID of the last message to include.
        flat_messages: All stored messages keyed by ID.

    Returns:
        Messages in chronological order (oldest first).
    """
    history: list[FlatMessage] = []
    seen: set[str] = set()
    current_id: str | None = node_id

    while current_id and current_id not in seen:
        message = flat_messages.get(current_id)
        if message is None:
            break
        seen.add(current_id)
        history.append(message)
        current_id = message.parent_id

    history.reverse()
    return history


@dataclass(frozen=True)
class ConversationTree:
    """Branching conversation stored as a flat map plus an active path.

    Attributes:
        flat_messages: All messages keyed by ID.
        active_path: Message IDs from the root to the current leaf.
    """

    flat_messages: dict[str, FlatMessage] = field(default_factory=dict)
    active_path: list[str] = field(default_factory=list)

    def active_history(self) -> list[FlatMessage]:
        """Return the messages on the active path.

        IDs on the path without a stored message are skipped.
        """
        return [
            self.flat_messages[message_id]
            for message_id in self.active_path
            if message_id in self.flat_messages
        ]

    def add_message(self, message: FlatMessage) -> "ConversationTree":
        """Return a new tree with the message stored and made the active leaf."""
        flat_messages = dict(self.flat_messages)
        flat_messages[message.id] = message
        return ConversationTree(
            flat_messages=flat_messages,
            active_path=[*self.active_path, message.id],
        )
