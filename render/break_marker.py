"""Placeholder protocol protecting literal ``<br>`` markers from the tokenizer.

The tokenizer normalizes literal break tags away inside some contexts (notably
table cells). Before tokenizing, every ``<br>`` is replaced with a private
placeholder and every ``<BR>`` with a second token derived from it; the
renderer later splits text runs on those tokens and restores a visible break.
Inside code the two spellings are restored exactly.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import List, Tuple

# Private-use code points never produced by ordinary Markdown content
BR_PLACEHOLDER = "\ue000BR\ue000"
UPPER_MARK = "\ue001"
BREAK_MARKER_TEXT = "<br>"


class BreakMode(Enum):
    """How a restored break is displayed."""
    MARKER = "marker"    # inline, distinctly styled "<br>" span
    NEWLINE = "newline"  # the pending line is flushed at the break


def upper_placeholder(placeholder: str = BR_PLACEHOLDER) -> str:
    """Token standing in for ``<BR>``.

    Wrapped in marks rather than suffixed, so a ``<br>`` followed by ordinary
    text can never read back as ``<BR>``.
    """
    if not placeholder:
        return ""
    return f"{UPPER_MARK}{placeholder}{UPPER_MARK}"


def _replacements(placeholder: str) -> Tuple[Tuple[str, str], ...]:
    # The upper token contains the lower one, so it is always handled first.
    return (("<BR>", upper_placeholder(placeholder)), ("<br>", placeholder))


def substitute_break_markers(source: str, placeholder: str = BR_PLACEHOLDER) -> str:
    """Replace the exact forms ``<br>`` and ``<BR>``; other spellings are left alone."""
    if not placeholder:
        return source
    for tag, token in _replacements(placeholder):
        source = source.replace(tag, token)
    return source


def split_on_placeholder(text: str, placeholder: str = BR_PLACEHOLDER) -> List[str]:
    """Split ``text`` around each break token; n tokens give n + 1 segments."""
    if not placeholder:
        return [text]
    pattern = "|".join(re.escape(token) for _, token in _replacements(placeholder))
    return re.split(pattern, text)


def restore_break_markers(text: str, placeholder: str = BR_PLACEHOLDER) -> str:
    """Turn break tokens back into the exact tag each one replaced."""
    if not placeholder:
        return text
    for tag, token in _replacements(placeholder):
        text = text.replace(token, tag)
    return text
