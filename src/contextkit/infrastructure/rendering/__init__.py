"""Rendering infrastructure."""

from contextkit.infrastructure.rendering.templates import (
    create_jinja_env,
    render_preview,
)

__all__ = ["create_jinja_env", "render_preview"]
