"""Painting adapter: rich styles and styled lines as prompt_toolkit formatted text."""
from __future__ import annotations

from typing import List, Optional, Tuple

from rich.color import Color, ColorType
from rich.style import Style

from render.styled import Line, StyledDocument

Fragments = List[Tuple[str, str]]

# Standard 16-color palette indices -> prompt_toolkit ANSI color names
ANSI_NAMES = (
    "ansiblack", "ansired", "ansigreen", "ansiyellow",
    "ansiblue", "ansimagenta", "ansicyan", "ansigray",
    "ansibrightblack", "ansibrightred", "ansibrightgreen", "ansibrightyellow",
    "ansibrightblue", "ansibrightmagenta", "ansibrightcyan", "ansiwhite",
)

_ATTRIBUTES = ("bold", "italic", "underline", "strike")


def color_to_pt(color: Optional[Color]) -> Optional[str]:
    if color is None or color.is_default:
        return None
    if color.type == ColorType.STANDARD and color.number is not None:
        return ANSI_NAMES[color.number]
    return color.get_truecolor().hex


def style_to_pt(style: Style) -> str:
    """Convert a rich Style into a prompt_toolkit style string.

    prompt_toolkit has no "dim" attribute, so dimmed text keeps its color only.
    """
    parts = []
    fg = color_to_pt(style.color)
    if fg:
        parts.append(f"fg:{fg}")
    bg = color_to_pt(style.bgcolor)
    if bg:
        parts.append(f"bg:{bg}")
    for attribute in _ATTRIBUTES:
        if getattr(style, attribute):
            parts.append(attribute)
    return " ".join(parts)


def line_fragments(line: Line) -> Fragments:
    return [(style_to_pt(span.style), span.text) for span in line.spans]


def document_fragments(document: StyledDocument, offset: int, height: int) -> Fragments:
    """Fragments for the rows visible from ``offset`` in a viewport ``height`` rows tall."""
    offset = max(0, offset)
    fragments: Fragments = []
    for index, line in enumerate(document.lines[offset:offset + max(0, height)]):
        if index:
            fragments.append(("", "\n"))
        fragments.extend(line_fragments(line))
    return fragments
