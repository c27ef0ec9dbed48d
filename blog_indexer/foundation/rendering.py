"""Markdown to HTML rendering backed by Python-Markdown."""

from __future__ import annotations

from typing import Sequence

import markdown

__all__ = ["DEFAULT_MARKDOWN_EXTENSIONS", "render_markdown"]

DEFAULT_MARKDOWN_EXTENSIONS: tuple[str, ...] = ("fenced_code", "tables")


def render_markdown(
    text: str, *, extensions: Sequence[str] | None = None
) -> str:
    """Render ``text`` into an HTML fragment."""
    return markdown.markdown(
        text,
        extensions=list(
            extensions if extensions is not None else DEFAULT_MARKDOWN_EXTENSIONS
        ),
        output_format="html",
    )
