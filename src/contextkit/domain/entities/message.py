"""Message entities."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

MessageRole = Literal["system", "user", "assistant"]

REQUEST_ROLES: frozenset[str] = frozenset({"system", "user", "assistant"})


@dataclass(frozen=True)
class RequestMessage:
    """A role-tagged message destined for a chat-completion request.

    Attributes:
        role: One of "system", "user" or "assistant".
        content: Message text. May be empty transiently inside the pipeline.
    """

    role: MessageRole
    content: str

    def with_content(self, content: str) -> "RequestMessage":
        """Return a copy with the content replaced."""
        return RequestMessage(role=self.role, content=content)

    def to_dict(self) -> dict[str, str]:
        """Serialize for a chat-completion request body."""
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class FlatMessage:
    """A stored conversation entry.

    Attributes:
        id: Message identifier.
        role: Author role. Roles outside REQUEST_ROLES never reach a request.
        content: Message text as stored.
        parent_id: Parent message ID in the conversation tree (None for roots).
        timestamp: When the message was created.
    """

    id: str
    role: str
    content: str
    parent_id: str | None = None
    timestamp: datetime | None = None

    def is_request_role(self) -> bool:
        """Check if this entry can be sent as a request message."""
        return self.role in REQUEST_ROLES
