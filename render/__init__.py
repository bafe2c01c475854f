"""
Markdown rendering for the terminal viewer.

This package provides:
- The styled document model (Span / Line / StyledDocument)
- The markdown-it event adapter and the single-pass document renderer
- The <br> placeholder protocol and color themes
"""
from __future__ import annotations

from render.break_marker import BR_PLACEHOLDER, BreakMode, substitute_break_markers
from render.markdown_doc import MarkdownRenderer, render_html, render_markdown
from render.styled import Line, Span, StyledDocument
from render.theme import Theme, available_themes, get_theme

__all__ = [
    "BR_PLACEHOLDER",
    "BreakMode",
    "Line",
    "MarkdownRenderer",
    "Span",
    "StyledDocument",
    "Theme",
    "available_themes",
    "get_theme",
    "render_html",
    "render_markdown",
    "substitute_break_markers",
]
