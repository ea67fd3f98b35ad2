"""System prompt resolution.

The effective system prompt is the runtime override when one is set,
otherwise the configured prompt, passed through registered transformers.
While a runtime override is active the controller is in override mode:
features such as summarization replace the system prompt wholesale and
prompt cards must not be mixed into it.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from contextkit.config.models import AIConfig

logger = logging.getLogger(__name__)

SystemPromptTransformer = Callable[[str], str]


class SystemPromptController:
    """Holds the runtime prompt override and the transformer chain."""

    def __init__(self) -> None:
        self._runtime_prompt: str | None = None
        self._transformers: list[SystemPromptTransformer] = []

    @property
    def runtime_prompt(self) -> str | None:
        return self._runtime_prompt

    def set_runtime_prompt(self, prompt: str | None) -> None:
        """Override the configured prompt. Blank or None clears the override."""
        self._runtime_prompt = prompt if prompt and prompt.strip() else None

    def clear_runtime_prompt(self) -> None:
        self._runtime_prompt = None

    def is_in_override_mode(self) -> bool:
        """Whether a runtime prompt is replacing the configured one."""
        return self._runtime_prompt is not None

    @contextmanager
    def override(self, prompt: str) -> Iterator[None]:
        """Use prompt as the system prompt inside the with block.

        The previous override, if any, is restored on exit.
        """
        previous = self._runtime_prompt
        self.set_runtime_prompt(prompt)
        try:
            yield
        finally:
            self._runtime_prompt = previous

    def add_transformer(self, transformer: SystemPromptTransformer) -> Callable[[], None]:
        """Register a transformer.

        Returns:
            A function that unregisters the transformer. Calling it more
            than once is harmless.
        """
        self._transformers.append(transformer)

        def remove() -> None:
            if transformer in self._transformers:
                self._transformers.remove(transformer)

        return remove

    def get_prompt(self, config: AIConfig) -> str:
        """Resolve the effective system prompt.

        A transformer that raises is skipped and its input passed on.
        """
        prompt = self._runtime_prompt or config.system_prompt or ""
        for transformer in list(self._transformers):
            try:
                prompt = transformer(prompt)
            except Exception:
                logger.warning(
                    "System prompt transformer %r failed; ignoring it",
                    transformer,
                    exc_info=True,
                )
        return prompt
