"""Preview state: a rendered document plus the scroll offset of the viewport showing it."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from render.break_marker import BR_PLACEHOLDER, BreakMode
from render.markdown_doc import DEFAULT_RULE_WIDTH, render_html, render_markdown
from render.styled import Line, Span, StyledDocument
from render.theme import Theme


@dataclass
class PreviewState:
    """Scroll position over an immutable StyledDocument."""
    document: StyledDocument
    title: str
    char_count: int
    scroll: int = 0

    @classmethod
    def from_file(
        cls,
        file_path: Union[str, Path],
        theme: Optional[Theme] = None,
        placeholder: str = BR_PLACEHOLDER,
        break_mode: BreakMode = BreakMode.MARKER,
        rule_width: int = DEFAULT_RULE_WIDTH,
    ) -> "PreviewState":
        """Read and render a Markdown file.

        Raises:
            OSError: If the file cannot be read
            UnicodeDecodeError: If the file is not UTF-8
        """
        path = Path(file_path)
        source = path.read_text(encoding="utf-8")
        document = render_markdown(source, placeholder, theme, break_mode=break_mode, rule_width=rule_width)
        return cls(document=document, title=str(path), char_count=len(source))

    @classmethod
    def from_html(cls, file_path: Union[str, Path]) -> "PreviewState":
        """Show the HTML rendering of a Markdown file as plain text."""
        path = Path(file_path)
        html = render_html(path.read_text(encoding="utf-8"))
        lines = tuple(Line((Span(row),) if row else ()) for row in html.splitlines())
        return cls(document=StyledDocument(lines), title=f"HTML Preview: {path}", char_count=len(html))

    @property
    def height(self) -> int:
        return self.document.height

    def max_scroll(self, frame_height: int) -> int:
        return max(0, self.document.height - max(0, frame_height))

    def scroll_up(self, amount: int = 1) -> None:
        self.scroll = max(0, self.scroll - amount)

    def scroll_down(self, frame_height: int, amount: int = 1) -> None:
        self.scroll = min(self.max_scroll(frame_height), self.scroll + amount)

    def page_up(self, frame_height: int) -> None:
        self.scroll_up(max(1, frame_height))

    def page_down(self, frame_height: int) -> None:
        self.scroll_down(frame_height, max(1, frame_height))

    def home(self) -> None:
        self.scroll = 0

    def end(self, frame_height: int) -> None:
        self.scroll = self.max_scroll(frame_height)

    def footer_text(self) -> str:
        return f"{self.title} | {self.char_count} chars | Press 'q' to close"
