"""Immutable editor over an ordered list of request messages."""

from collections.abc import Callable, Iterable, Sequence

from contextkit.domain.entities.message import FlatMessage, RequestMessage

MessagePredicate = Callable[[RequestMessage, int], bool]
MessageModifier = Callable[[RequestMessage], RequestMessage]


class MessageEditor:
    """Ordered sequence of RequestMessage with copy-on-write operations.

    Every operation returns a new editor; the receiver is never changed,
    so an editor can be shared between pipelines or kept for undo.
    Out-of-range positions and unmatched predicates are no-ops, never
    errors.
    """

    __slots__ = ("_messages",)

    def __init__(self, messages: Iterable[RequestMessage] = ()) -> None:
        self._messages: tuple[RequestMessage, ...] = tuple(messages)

    @classmethod
    def from_history(cls, history: Iterable[FlatMessage]) -> "MessageEditor":
        """Create an editor from stored conversation entries.

        Entries whose role is not system, user or assistant are dropped.
        Content is copied verbatim.
        """
        return cls(
            RequestMessage(role=entry.role, content=entry.content)  # type: ignore[arg-type]
            for entry in history
            if entry.is_request_role()
        )

    @classmethod
    def from_messages(cls, messages: Iterable[RequestMessage]) -> "MessageEditor":
        return cls(messages)

    @classmethod
    def empty(cls) -> "MessageEditor":
        return cls()

    # ===== 挿入 =====

    def insert(self, message: RequestMessage, position: int) -> "MessageEditor":
        """Insert a message at position.

        Positions past the end append. A negative position p resolves to
        max(0, len + p + 1), so -1 appends.
        """
        length = len(self._messages)
        if position < 0:
            index = max(0, length + position + 1)
        else:
            index = min(position, length)
        return MessageEditor(
            (*self._messages[:index], message, *self._messages[index:])
        )

    def append(self, message: RequestMessage) -> "MessageEditor":
        return MessageEditor((*self._messages, message))

    def prepend(self, message: RequestMessage) -> "MessageEditor":
        return MessageEditor((message, *self._messages))

    # ===== 削除 =====

    def remove_at(self, position: int) -> "MessageEditor":
        """Remove the message at position (-1 is the last one)."""
        index = self._resolve_index(position)
        if index is None:
            return self
        return MessageEditor(self._messages[:index] + self._messages[index + 1 :])

    def remove_where(self, predicate: MessagePredicate) -> "MessageEditor":
        """Remove every message matching predicate(message, index)."""
        return MessageEditor(
            m for i, m in enumerate(self._messages) if not predicate(m, i)
        )

    # ===== 変更 =====

    def modify_at(self, position: int, modifier: MessageModifier) -> "MessageEditor":
        """Replace the message at position with modifier(message)."""
        index = self._resolve_index(position)
        if index is None:
            return self
        messages = list(self._messages)
        messages[index] = modifier(messages[index])
        return MessageEditor(messages)

    def modify_where(
        self, predicate: MessagePredicate, modifier: MessageModifier
    ) -> "MessageEditor":
        """Replace every message matching predicate with modifier(message)."""
        return MessageEditor(
            modifier(m) if predicate(m, i) else m
            for i, m in enumerate(self._messages)
        )

    # ===== 検索 =====

    def find_index(self, predicate: MessagePredicate) -> int:
        """Index of the first match, or -1."""
        for i, message in enumerate(self._messages):
            if predicate(message, i):
                return i
        return -1

    def find_last_index(self, predicate: MessagePredicate) -> int:
        """Index of the last match, or -1."""
        for i in range(len(self._messages) - 1, -1, -1):
            if predicate(self._messages[i], i):
                return i
        return -1

    # ===== 切り詰め =====

    def limit(self, count: int) -> "MessageEditor":
        """Keep every system message plus the last count other messages.

        System messages are moved in front of the rest. A count of zero or
        less returns this editor unchanged.
        """
        if count <= 0:
            return self
        system = [m for m in self._messages if m.role == "system"]
        others = [m for m in self._messages if m.role != "system"]
        return MessageEditor([*system, *others[-count:]])

    def take_first(self, count: int) -> "MessageEditor":
        return MessageEditor(self._messages[: max(0, count)])

    def take_last(self, count: int) -> "MessageEditor":
        if count <= 0:
            return MessageEditor()
        return MessageEditor(self._messages[-count:])

    def skip(self, count: int) -> "MessageEditor":
        return MessageEditor(self._messages[max(0, count) :])

    # ===== 高度な操作 =====

    def transform(
        self, transformer: Callable[[list[RequestMessage]], Sequence[RequestMessage]]
    ) -> "MessageEditor":
        """Rewrite the whole list. The transformer receives a copy."""
        return MessageEditor(transformer(list(self._messages)))

    def merge(self, other: "MessageEditor") -> "MessageEditor":
        """Concatenate: this editor's messages, then other's."""
        return MessageEditor(self._messages + other._messages)

    def when(
        self, condition: bool, operation: Callable[["MessageEditor"], "MessageEditor"]
    ) -> "MessageEditor":
        return operation(self) if condition else self

    # ===== 出力 =====

    def build(self) -> list[RequestMessage]:
        """Materialize the messages as a new list."""
        return list(self._messages)

    def count(self) -> int:
        return len(self._messages)

    def clone(self) -> "MessageEditor":
        return MessageEditor(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MessageEditor):
            return NotImplemented
        return self._messages == other._messages

    def __hash__(self) -> int:
        return hash(self._messages)

    def __repr__(self) -> str:
        return f"MessageEditor({list(self._messages)!r})"

    def _resolve_index(self, position: int) -> int | None:
        index = position + len(self._messages) if position < 0 else position
        if 0 <= index < len(self._messages):
            return index
        return None
