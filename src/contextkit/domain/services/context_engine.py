"""Context engine - assembles request messages from conversation history.

Pipeline (fixed order):

1. Resolve the system prompt (runtime override / config, then transformers)
2. Inject it as the single system message
3. Limit history
4. Remove empty messages
5. Temporary content: priority merge with after_system cards, or append
6. system / user_end prompt cards (skipped in override mode)
7. Registered custom operators
8. Compression (when enabled)
"""

import logging
from collections.abc import Callable, Iterable, Sequence

from contextkit.config.models import AIConfig
from contextkit.domain.entities.context_metadata import ContextMetadata
from contextkit.domain.entities.conversation import ConversationTree
from contextkit.domain.entities.message import FlatMessage, RequestMessage
from contextkit.domain.entities.prompt_card import PromptCard
from contextkit.domain.services.message_editor import MessageEditor
from contextkit.domain.services.message_operators import (
    MessageOperator,
    TempContextPlacement,
    add_temporary_context,
    compress_messages,
    inject_system_prompt,
    limit_history,
    remove_empty_messages,
)
from contextkit.domain.services.prompt_cards import (
    MERGED_FILE_SEPARATOR,
    PromptCardSource,
    apply_system_cards,
    apply_user_end_cards,
    collect_file_contents,
    insert_prioritized_context,
)
from contextkit.domain.services.system_prompt import SystemPromptController

logger = logging.getLogger(__name__)


class ContextEngine:
    """Builds the message list sent to a chat-completion API.

    The engine holds no per-request state. Its only state is the list of
    registered custom operators, which are applied to every subsequent
    build until unregistered.
    """

    def __init__(
        self,
        system_prompt: SystemPromptController | None = None,
        card_source: PromptCardSource | None = None,
        *,
        debug_messages: bool = False,
    ) -> None:
        """Initialize the engine.

        Args:
            system_prompt: Controller resolving the effective system prompt.
            card_source: Prompt card registry. No cards are applied if None.
            debug_messages: If True, log assembled messages at INFO level.
        """
        self._system_prompt = system_prompt or SystemPromptController()
        self._card_source = card_source
        self._debug_messages = debug_messages
        self._custom_operators: list[MessageOperator] = []

    @property
    def system_prompt(self) -> SystemPromptController:
        return self._system_prompt

    def register_operator(self, operator: MessageOperator) -> Callable[[], None]:
        """Register a custom operator applied after the built-in steps.

        Returns:
            A function that unregisters the operator.
        """
        self._custom_operators.append(operator)

        def unregister() -> None:
            if operator in self._custom_operators:
                self._custom_operators.remove(operator)

        return unregister

    def get_context_metadata_from_tree(
        self, tree: ConversationTree, config: AIConfig
    ) -> ContextMetadata:
        """Mark which messages on the active path fall within the history limit.

        Only user and assistant messages are counted.
        """
        history = [
            m for m in tree.active_history() if m.role in ("user", "assistant")
        ]
        total = len(history)
        limit = max(0, config.history_limit or 0)
        included = history[-limit:] if limit > 0 else history
        included_ids = {m.id for m in included}

        return ContextMetadata(
            total_messages=total,
            included_messages=len(included),
            excluded_messages=max(0, total - len(included)),
            inclusion_map={m.id: m.id in included_ids for m in history},
        )

    def build_request_messages(
        self,
        history: Iterable[FlatMessage],
        config: AIConfig,
        temp_content: str | None = None,
        temp_placement: TempContextPlacement = "append",
        temp_content_list: Sequence[str] | None = None,
        *,
        override_mode: bool | None = None,
    ) -> list[RequestMessage]:
        """Build the final request messages.

        Args:
            history: Conversation history, oldest first.
            config: AI configuration.
            temp_content: Temporary content for this request only.
            temp_placement: "append" to the last user message, or
                "after_system" as separate messages ordered by priority.
            temp_content_list: Multiple temporary contents (e.g. one per
                attached file). Takes precedence over temp_content.
            override_mode: Skip prompt cards. When None, the system prompt
                controller decides.

        Returns:
            Messages ready to be serialized into a request body.
        """
        if override_mode is None:
            override_mode = self._system_prompt.is_in_override_mode()
        cards = self._enabled_cards(override_mode)

        editor = MessageEditor.from_history(history)
        editor = inject_system_prompt(self._system_prompt.get_prompt(config))(editor)
        editor = limit_history(config.history_limit)(editor)
        editor = remove_empty_messages()(editor)

        if temp_placement == "after_system":
            file_contents = collect_file_contents(
                temp_content, temp_content_list, config.file_content_mode
            )
            editor = insert_prioritized_context(
                file_contents, config.file_content_priority, cards
            )(editor)
        else:
            editor = add_temporary_context(
                self._combined_temp_content(temp_content, temp_content_list),
                "append",
            )(editor)

        editor = apply_system_cards(cards)(editor)
        editor = apply_user_end_cards(cards)(editor)

        for operator in list(self._custom_operators):
            editor = operator(editor)

        if config.enable_compression:
            editor = compress_messages(config.compression_options)(editor)

        messages = editor.build()
        if self._should_log():
            self._log_messages(messages)
        return messages

    def build_with_custom_pipeline(
        self,
        history: Iterable[FlatMessage],
        pipeline: MessageOperator,
    ) -> list[RequestMessage]:
        """Build messages with a caller-supplied pipeline instead of the default."""
        return pipeline(MessageEditor.from_history(history)).build()

    def create_editor(self, history: Iterable[FlatMessage]) -> MessageEditor:
        return MessageEditor.from_history(history)

    def _enabled_cards(self, override_mode: bool) -> list[PromptCard]:
        if override_mode or self._card_source is None:
            return []
        return list(self._card_source.get_enabled_cards())

    @staticmethod
    def _combined_temp_content(
        temp_content: str | None, temp_content_list: Sequence[str] | None
    ) -> str | None:
        if temp_content_list:
            items = [item for item in temp_content_list if item.strip()]
            return MERGED_FILE_SEPARATOR.join(items)
        return temp_content

    def _should_log(self) -> bool:
        """Check if logging should occur."""
        return self._debug_messages or logger.isEnabledFor(logging.DEBUG)

    def _log_messages(self, messages: list[RequestMessage]) -> None:
        """Log assembled request messages."""
        log_func = logger.info if self._debug_messages else logger.debug
        log_func("=== Request Messages ===")
        for i, message in enumerate(messages):
            log_func("[%d] role=%s", i, message.role)
            log_func("    content: %s", message.content)
        log_func("=== End of Messages ===")
