"""Directory explorer state: entries of the current directory and the selection cursor."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from render.break_marker import BR_PLACEHOLDER, BreakMode
from render.markdown_doc import DEFAULT_RULE_WIDTH
from render.theme import Theme
from util.path_browser import PathBrowser, PathItem
from viewer.preview import PreviewState

logger = logging.getLogger(__name__)

HELP_TEXT = "j/k or ↓/↑: Move | Enter: Open | h or Backspace: Up | :<command> Enter: Run"


class ExplorerState:
    """Listing of one directory with a wrapping selection cursor and a command line."""

    def __init__(self, current_path: Union[str, Path, None] = None, browser: Optional[PathBrowser] = None):
        self.current_path = Path(current_path or os.getcwd()).resolve()
        self.browser = browser or PathBrowser()
        self.entries: List[PathItem] = []
        self.selected: Optional[int] = None
        self.error_message: Optional[str] = None
        self.command_input = ""
        self.in_command_mode = False
        self.load_entries()

    def load_entries(self) -> None:
        """Reload the listing; the cursor always goes back to the first entry.

        Raises:
            FileNotFoundError: If the current directory no longer exists
            ValueError: If it is not a readable directory
        """
        self.entries = self.browser.list_directory(str(self.current_path))
        self.selected = 0 if self.entries else None
        logger.debug("Loaded %d entries from %s", len(self.entries), self.current_path)

    @property
    def selected_item(self) -> Optional[PathItem]:
        if self.selected is None or self.selected >= len(self.entries):
            return None
        return self.entries[self.selected]

    def next(self) -> None:
        if not self.entries:
            return
        if self.selected is None or self.selected >= len(self.entries) - 1:
            self.selected = 0
        else:
            self.selected += 1

    def previous(self) -> None:
        if not self.entries:
            return
        if self.selected is None:
            self.selected = 0
        elif self.selected == 0:
            self.selected = len(self.entries) - 1
        else:
            self.selected -= 1

    def change_directory(self, path: Union[str, Path]) -> None:
        """Move to ``path``; on failure stay where we are and report the error."""
        previous = self.current_path
        self.current_path = Path(path).resolve()
        try:
            self.load_entries()
        except (FileNotFoundError, ValueError) as e:
            self.current_path = previous
            self.error_message = str(e)

    def go_parent(self) -> None:
        parent = self.current_path.parent
        if parent != self.current_path:
            self.change_directory(parent)

    def enter_selected(
        self,
        theme: Optional[Theme] = None,
        placeholder: str = BR_PLACEHOLDER,
        break_mode: BreakMode = BreakMode.MARKER,
        rule_width: int = DEFAULT_RULE_WIDTH,
    ) -> Optional[PreviewState]:
        """Open the selected entry.

        Directories are entered; Markdown files are rendered into a preview.
        Failures are reported through ``error_message`` and never raised.
        """
        item = self.selected_item
        if item is None:
            return None
        if item.is_dir:
            self.change_directory(item.path)
            return None
        if not item.is_markdown:
            self.error_message = "Only Markdown files can be previewed."
            return None
        try:
            return PreviewState.from_file(
                item.path, theme, placeholder, break_mode=break_mode, rule_width=rule_width
            )
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Preview of %s failed: %s", item.path, e)
            self.error_message = f"Cannot open preview: {e}"
            return None

    def status_text(self) -> str:
        if self.in_command_mode:
            return f":{self.command_input}"
        if self.error_message:
            return self.error_message
        return HELP_TEXT
