"""Context metadata entity."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ContextMetadata:
    """Which history messages count toward the request context.

    Used by UIs to highlight messages that fall outside the history limit.

    Attributes:
        total_messages: Number of user/assistant messages on the active path.
        included_messages: Number of those sent with the next request.
        excluded_messages: Number of those cut off by the history limit.
        inclusion_map: Message ID to whether it is included.
    """

    total_messages: int
    included_messages: int
    excluded_messages: int
    inclusion_map: dict[str, bool] = field(default_factory=dict)
