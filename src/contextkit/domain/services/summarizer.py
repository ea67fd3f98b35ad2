"""Summarization request planning.

A summarize request stores only a placeholder user message in the
conversation; the real instruction, history and files travel as
temporary context, and the system prompt is replaced for the duration of
the request (see SystemPromptController.override).
"""

from dataclasses import dataclass

DEFAULT_SUMMARIZE_PROMPT = (
    "你是一名专业的内容总结助手。请阅读用户提供的对话历史和文件内容，"
    "提炼关键信息、主要观点和结论，输出结构清晰、准确完整的概括。"
)
DEFAULT_SUMMARIZE_INSTRUCTION = "请对上述内容进行高质量概括"
SUMMARY_PLACEHOLDER = "..."


@dataclass(frozen=True)
class SummarizePlan:
    """Inputs for one summarize request.

    Attributes:
        user_message_content: Placeholder saved to the conversation history.
        extra_context: Instruction and material sent as temporary context.
        system_prompt: System prompt used instead of the configured one.
    """

    user_message_content: str
    extra_context: str
    system_prompt: str


def build_summarize_plan(
    input_residual: str | None = None,
    conversation_history_text: str | None = None,
    files_text: str | None = None,
    custom_prompt: str | None = None,
) -> SummarizePlan:
    """Build a summarize plan.

    Args:
        input_residual: Extra instruction typed by the user.
        conversation_history_text: Conversation history, already limited.
        files_text: Content of the selected files.
        custom_prompt: Summarize system prompt overriding the default.

    Returns:
        SummarizePlan.
    """
    instruction = (input_residual or "").strip() or DEFAULT_SUMMARIZE_INSTRUCTION
    parts = [f"【概括指令】\n{instruction}"]

    history = (conversation_history_text or "").strip()
    if history:
        parts.append(f"【对话历史】\n{history}")

    files = (files_text or "").strip()
    if files:
        parts.append(f"【文件内容】\n{files}")

    return SummarizePlan(
        user_message_content=SUMMARY_PLACEHOLDER,
        extra_context="\n\n" + "\n\n".join(parts),
        system_prompt=(custom_prompt or "").strip() or DEFAULT_SUMMARIZE_PROMPT,
    )
