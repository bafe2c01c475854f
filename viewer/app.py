"""Full-screen Markdown browser: directory explorer plus document preview.

The screen is a prompt_toolkit application with two windows: the main area
(explorer listing or the visible slice of the rendered document) and a
one-row status bar / footer. Key presses are translated to plain key names
and fed to ``MarkdownViewerApp.handle_key``, which holds all state changes.
"""
from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from prompt_toolkit.application import Application
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import HSplit, Layout, Window, WindowAlign
from prompt_toolkit.layout.controls import FormattedTextControl

from render.break_marker import BR_PLACEHOLDER, BreakMode
from render.markdown_doc import DEFAULT_RULE_WIDTH
from render.theme import GITHUB_DARK, Theme
from util.command_helpers import CommandAction, handle_command
from util.path_browser import PathBrowser
from viewer.explorer import ExplorerState
from viewer.formatting import Fragments, document_fragments, style_to_pt
from viewer.preview import PreviewState

logger = logging.getLogger(__name__)

HIGHLIGHT_SYMBOL = ">> "
SIZE_GAP = "  "
STATUS_ROWS = 1

# prompt_toolkit key name -> key name understood by handle_key
KEY_NAMES = {
    "up": "up",
    "down": "down",
    "left": "left",
    "right": "right",
    "enter": "enter",
    "backspace": "backspace",
    "escape": "esc",
    "pageup": "pgup",
    "pagedown": "pgdown",
    "home": "home",
    "end": "end",
}


class Mode(Enum):
    EXPLORER = "explorer"
    PREVIEW = "preview"


class MarkdownViewerApp:
    """Explorer and preview modes with the key map of a vi-flavoured pager."""

    def __init__(
        self,
        start_path: Union[str, Path, None] = None,
        theme: Optional[Theme] = None,
        placeholder: str = BR_PLACEHOLDER,
        break_mode: BreakMode = BreakMode.MARKER,
        rule_width: int = DEFAULT_RULE_WIDTH,
        show_hidden: bool = True,
    ):
        self.theme = theme or GITHUB_DARK
        self.placeholder = placeholder
        self.break_mode = break_mode
        self.rule_width = rule_width
        self.explorer = ExplorerState(start_path, PathBrowser(show_hidden=show_hidden))
        self.preview: Optional[PreviewState] = None
        self.mode = Mode.EXPLORER
        self.list_offset = 0
        self.application: Optional[Application] = None

    # ---- state transitions ----
    def open_file(self, file_path: Union[str, Path]) -> bool:
        """Preview ``file_path`` directly; failures land in the status bar."""
        is_valid, message = self.explorer.browser.validate_markdown_file(str(file_path))
        if not is_valid:
            self.explorer.error_message = message
            return False
        try:
            self.preview = PreviewState.from_file(
                file_path, self.theme, self.placeholder, break_mode=self.break_mode, rule_width=self.rule_width
            )
        except (OSError, UnicodeDecodeError) as e:
            self.explorer.error_message = f"Cannot open preview: {e}"
            return False
        self.mode = Mode.PREVIEW
        return True

    def handle_key(self, key: str, frame_height: int) -> bool:
        """Apply one key press. Returns False when the program should quit."""
        if self.mode is Mode.PREVIEW and self.preview is not None:
            self._handle_preview_key(key, frame_height)
            return True
        if self.explorer.in_command_mode:
            return self._handle_command_key(key)
        self._handle_explorer_key(key)
        return True

    def _handle_preview_key(self, key: str, frame_height: int) -> None:
        preview = self.preview
        if key == "q":
            self.preview = None
            self.mode = Mode.EXPLORER
        elif key in ("up", "k"):
            preview.scroll_up()
        elif key in ("down", "j"):
            preview.scroll_down(frame_height)
        elif key in ("pgup", "b"):
            preview.page_up(frame_height)
        elif key in ("pgdown", " "):
            preview.page_down(frame_height)
        elif key in ("home", "g"):
            preview.home()
        elif key in ("end", "G"):
            preview.end(frame_height)

    def _handle_command_key(self, key: str) -> bool:
        explorer = self.explorer
        if key == "enter":
            command_text = explorer.command_input.strip()
            explorer.command_input = ""
            explorer.in_command_mode = False
            result = handle_command(command_text, explorer)
            if result.action is CommandAction.QUIT:
                return False
            if result.action is CommandAction.PREVIEW:
                self.preview = result.preview
                self.mode = Mode.PREVIEW
        elif key == "backspace":
            explorer.command_input = explorer.command_input[:-1]
        elif key == "esc":
            explorer.command_input = ""
            explorer.in_command_mode = False
        elif len(key) == 1 and key.isprintable():
            explorer.command_input += key
        return True

    def _handle_explorer_key(self, key: str) -> None:
        explorer = self.explorer
        # Any key clears the previous error
        explorer.error_message = None
        if key == ":":
            explorer.in_command_mode = True
        elif key in ("down", "j"):
            explorer.next()
        elif key in ("up", "k"):
            explorer.previous()
        elif key in ("left", "h", "backspace"):
            explorer.go_parent()
            self.list_offset = 0
        elif key == "enter":
            previous_path = explorer.current_path
            preview = explorer.enter_selected(
                self.theme, self.placeholder, break_mode=self.break_mode, rule_width=self.rule_width
            )
            if preview is not None:
                self.preview = preview
                self.mode = Mode.PREVIEW
            elif explorer.current_path != previous_path:
                self.list_offset = 0

    # ---- painting ----
    def main_fragments(self, height: int) -> Fragments:
        if self.mode is Mode.PREVIEW and self.preview is not None:
            return document_fragments(self.preview.document, self.preview.scroll, height)
        return self._explorer_fragments(height)

    def _explorer_fragments(self, height: int) -> Fragments:
        explorer = self.explorer
        theme = self.theme
        fragments: Fragments = [(style_to_pt(theme.heading_style(1)), str(explorer.current_path))]
        rows = max(0, height - 1)
        if explorer.selected is not None and rows:
            # Keep the cursor inside the visible rows
            if explorer.selected < self.list_offset:
                self.list_offset = explorer.selected
            elif explorer.selected >= self.list_offset + rows:
                self.list_offset = explorer.selected - rows + 1
        padding = " " * len(HIGHLIGHT_SYMBOL)
        for index in range(self.list_offset, min(len(explorer.entries), self.list_offset + rows)):
            item = explorer.entries[index]
            fragments.append(("", "\n"))
            if index == explorer.selected:
                fragments.append((style_to_pt(theme.selection_style), HIGHLIGHT_SYMBOL + item.display_name))
            else:
                style = theme.directory_style if item.is_dir else theme.default_style
                fragments.append((style_to_pt(style), padding + item.display_name))
            size = explorer.browser.format_file_size(item.size)
            if size:
                fragments.append((style_to_pt(theme.marker_style), SIZE_GAP + size))
        return fragments

    def status_fragments(self) -> Fragments:
        theme = self.theme
        if self.mode is Mode.PREVIEW and self.preview is not None:
            return [(style_to_pt(theme.footer_style), self.preview.footer_text())]
        explorer = self.explorer
        style = theme.error_style if explorer.error_message and not explorer.in_command_mode else theme.chrome_style
        return [(style_to_pt(style), explorer.status_text())]

    def status_align(self) -> WindowAlign:
        return WindowAlign.RIGHT if self.mode is Mode.PREVIEW else WindowAlign.LEFT

    # ---- prompt_toolkit wiring ----
    def frame_height(self) -> int:
        if self.application is None:
            return 0
        return max(0, self.application.output.get_size().rows - STATUS_ROWS)

    def build_application(self) -> Application:
        bindings = KeyBindings()

        def dispatch(event, key: str) -> None:
            if not self.handle_key(key, self.frame_height()):
                event.app.exit()

        for pt_key, key in KEY_NAMES.items():
            def handler(event, key=key):
                dispatch(event, key)
            bindings.add(pt_key, eager=pt_key == "escape")(handler)

        @bindings.add("<any>")
        def handle_character(event):
            """Plain characters: vi-style navigation or command-line input."""
            if event.data and event.data.isprintable():
                dispatch(event, event.data)

        @bindings.add("c-c")
        def handle_ctrl_c_quit(event):
            event.app.exit()

        chrome = style_to_pt(self.theme.chrome_style)
        main_window = Window(
            FormattedTextControl(lambda: self.main_fragments(self.frame_height())),
            wrap_lines=False,
            style=chrome,
        )
        status_window = Window(
            FormattedTextControl(self.status_fragments),
            height=STATUS_ROWS,
            align=self.status_align,
            style=chrome,
        )
        self.application = Application(
            layout=Layout(HSplit([main_window, status_window])),
            key_bindings=bindings,
            full_screen=True,
        )
        return self.application

    def run(self) -> None:
        application = self.build_application()
        logger.debug("Starting viewer in %s", self.explorer.current_path)
        application.run()
