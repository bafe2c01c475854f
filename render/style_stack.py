"""Style Context Stack: the active text style as block and inline scopes open and close."""
from __future__ import annotations

import logging
from typing import List, Optional

from rich.style import Style

logger = logging.getLogger(__name__)


class StyleStack:
    """LIFO stack of resolved styles that never drops below its baseline entry.

    The baseline is the document default style. ``push`` merges the given
    attributes onto the current top, or onto the baseline for scopes that
    establish a wholly new base (headings, quotes, links).
    """

    def __init__(self, baseline: Style):
        self._baseline = baseline
        self._stack: List[Style] = [baseline]

    @property
    def baseline(self) -> Style:
        return self._baseline

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def at_baseline(self) -> bool:
        return len(self._stack) == 1

    def current(self) -> Style:
        return self._stack[-1] if self._stack else self._baseline

    def push(self, style: Style, replace: bool = False) -> Style:
        base = self._baseline if replace else self.current()
        resolved = base + style
        self._stack.append(resolved)
        return resolved

    def pop(self) -> Optional[Style]:
        if len(self._stack) <= 1:
            logger.debug("Ignoring style pop at baseline")
            return None
        return self._stack.pop()
