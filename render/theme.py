"""Color themes for the Markdown viewer."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from rich.style import Style


@dataclass(frozen=True)
class Theme:
    """Palette used both by the document renderer and the viewer chrome.

    Colors are any value ``rich.color.Color.parse`` accepts ("#0d1117",
    "bright_black", "default", ...).
    """
    name: str
    bg: str
    fg: str
    selection_bg: str
    selection_fg: str
    comment: str
    link: str
    heading: str
    heading_alt: str
    heading_minor: str
    code_bg: str
    inline_code_bg: str
    code_label: str
    quote_fg: str
    quote_border: str
    hr: str
    break_marker: str
    error: str

    @property
    def default_style(self) -> Style:
        return Style(color=self.fg)

    def heading_style(self, level: int) -> Style:
        if level <= 1:
            return Style(color=self.heading, bold=True)
        if level == 2:
            return Style(color=self.heading_alt, bold=True)
        return Style(color=self.heading_minor, bold=True, dim=True)

    @property
    def quote_style(self) -> Style:
        return Style(color=self.quote_fg, italic=True)

    @property
    def link_style(self) -> Style:
        return Style(color=self.link, underline=True)

    @property
    def image_style(self) -> Style:
        return Style(color=self.link, italic=True)

    @property
    def inline_code_style(self) -> Style:
        return Style(color=self.fg, bgcolor=self.inline_code_bg)

    @property
    def code_block_style(self) -> Style:
        # Background only; the foreground is inherited from the enclosing scope.
        return Style(bgcolor=self.code_bg)

    @property
    def raw_html_style(self) -> Style:
        return Style(color=self.comment)

    @property
    def border_style(self) -> Style:
        return Style(color=self.comment)

    @property
    def marker_style(self) -> Style:
        return Style(color=self.comment)

    @property
    def quote_border_style(self) -> Style:
        return Style(color=self.quote_border)

    @property
    def code_label_style(self) -> Style:
        return Style(color=self.code_label)

    @property
    def rule_style(self) -> Style:
        return Style(color=self.hr)

    @property
    def break_marker_style(self) -> Style:
        return Style(color=self.break_marker, bold=True)

    @property
    def chrome_style(self) -> Style:
        return Style(color=self.fg, bgcolor=self.bg)

    @property
    def selection_style(self) -> Style:
        return Style(color=self.selection_fg, bgcolor=self.selection_bg, bold=True)

    @property
    def footer_style(self) -> Style:
        return Style(color=self.comment, bgcolor=self.bg)

    @property
    def error_style(self) -> Style:
        return Style(color=self.error, bgcolor=self.bg)

    @property
    def directory_style(self) -> Style:
        return Style(color=self.link)


GITHUB_DARK = Theme(
    name="github-dark",
    bg="#0d1117",
    fg="#c9d1d9",
    selection_bg="#032252",
    selection_fg="#c9d1d9",
    comment="#8b949e",
    link="#58a6ff",
    heading="#58a6ff",
    heading_alt="#79c0ff",
    heading_minor="#d2a8ff",
    code_bg="#161b22",
    inline_code_bg="#282d35",
    code_label="yellow",
    quote_fg="#8b949e",
    quote_border="#30363d",
    hr="#21262d",
    break_marker="#f0883e",
    error="red",
)

# 16-color fallback for terminals without truecolor support
ANSI = Theme(
    name="ansi",
    bg="default",
    fg="default",
    selection_bg="blue",
    selection_fg="bright_white",
    comment="bright_black",
    link="blue",
    heading="bright_blue",
    heading_alt="cyan",
    heading_minor="magenta",
    code_bg="black",
    inline_code_bg="bright_black",
    code_label="yellow",
    quote_fg="bright_black",
    quote_border="bright_black",
    hr="bright_black",
    break_marker="yellow",
    error="red",
)

THEMES: Dict[str, Theme] = {theme.name: theme for theme in (GITHUB_DARK, ANSI)}
DEFAULT_THEME = GITHUB_DARK.name


def available_themes() -> List[str]:
    return sorted(THEMES)


def get_theme(name: str) -> Theme:
    try:
        return THEMES[name]
    except KeyError:
        raise KeyError(f"Unknown theme '{name}'. Available: {', '.join(available_themes())}") from None
