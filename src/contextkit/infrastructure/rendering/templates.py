"""Jinja2 template utilities for request previews."""

from collections.abc import Sequence

from jinja2 import Environment, PackageLoader, select_autoescape

from contextkit.domain.entities.message import RequestMessage
from contextkit.domain.services.text_compressor import CompressionStats

PREVIEW_TEMPLATE = "preview.j2"


def indent_block(text: str, prefix: str = "    ") -> str:
    """Prefix every line of text, including blank ones."""
    return "\n".join(prefix + line for line in text.split("\n"))


def create_jinja_env() -> Environment:
    """Create Jinja2 environment for preview templates.

    Templates are loaded from the contextkit.infrastructure.rendering.templates
    package.

    Returns:
        Configured Jinja2 environment.
    """
    env = Environment(
        loader=PackageLoader("contextkit.infrastructure.rendering", "templates"),
        autoescape=select_autoescape(),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["indent_block"] = indent_block
    return env


def render_preview(
    messages: Sequence[RequestMessage],
    stats: Sequence[CompressionStats] | None = None,
    summary: dict[str, object] | None = None,
    env: Environment | None = None,
) -> str:
    """Render assembled request messages as plain text.

    Args:
        messages: Request messages in send order.
        stats: Per-message compression statistics, aligned with messages.
        summary: Configuration summary shown in the header.
        env: Jinja2 environment. A new one is created if None.

    Returns:
        Rendered preview.
    """
    if stats is not None and len(stats) != len(messages):
        raise ValueError(
            f"Expected {len(messages)} compression stats, got {len(stats)}"
        )
    template = (env or create_jinja_env()).get_template(PREVIEW_TEMPLATE)
    entries = [
        {
            "index": i,
            "role": message.role,
            "content": message.content,
            "stats": stats[i] if stats is not None else None,
        }
        for i, message in enumerate(messages)
    ]
    total_original = sum(s.original_size for s in stats) if stats else 0
    total_compressed = sum(s.compressed_size for s in stats) if stats else 0
    return template.render(
        entries=entries,
        summary=summary or {},
        total_original=total_original,
        total_compressed=total_compressed,
        has_stats=stats is not None,
    )
