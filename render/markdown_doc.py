"""Markdown to StyledDocument renderer.

A single forward pass over the parse events. All mutable state for one
document lives in a ``RenderContext`` created per call, so a
``MarkdownRenderer`` can be shared between threads.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from rich.style import Style

from render.break_marker import (
    BR_PLACEHOLDER,
    BREAK_MARKER_TEXT,
    BreakMode,
    restore_break_markers,
    split_on_placeholder,
    substitute_break_markers,
)
from render.events import (
    Alignment,
    Code,
    End,
    Event,
    HardBreak,
    Html,
    Rule,
    SoftBreak,
    Start,
    Tag,
    Text,
    create_parser,
    markdown_events,
)
from render.style_stack import StyleStack
from render.styled import Line, Span, StyledDocument
from render.theme import GITHUB_DARK, Theme

logger = logging.getLogger(__name__)

# ---------------- Glyphs ----------------
QUOTE_MARKER = "▎"
BULLET = "• "
LIST_INDENT = "  "
RULE_GLYPH = "─"
CODE_HEADER = "┌─── "
CODE_BORDER = "│ "
CODE_FOOTER = "└" + "─" * 18
ROW_START = "│ "
CELL_SEPARATOR = " │ "
ROW_END = " │"

DEFAULT_RULE_WIDTH = 80
DEFAULT_TABLE_COLUMN_WIDTH = 12

# (left corner, junction, right corner)
TABLE_TOP = ("┌", "┬", "┐")
TABLE_HEADER_SEPARATOR = ("├", "┼", "┤")
TABLE_BOTTOM = ("└", "┴", "┘")

# Scopes whose style is computed from the document default instead of the enclosing scope
BASE_REPLACING_TAGS = frozenset({Tag.HEADING, Tag.BLOCK_QUOTE, Tag.LINK, Tag.IMAGE})


@dataclass
class TableContext:
    alignments: Tuple[Alignment, ...] = ()
    in_header: bool = False
    column: int = 0
    cell_start: int = 0
    cell_flushes: int = 0


@dataclass
class RenderContext:
    """Everything that changes while one document is rendered."""
    styles: StyleStack
    lists: List[Optional[int]] = field(default_factory=list)
    table: Optional[TableContext] = None
    pending: List[Span] = field(default_factory=list)
    lines: List[Line] = field(default_factory=list)
    open_tags: List[Tag] = field(default_factory=list)
    in_code_block: bool = False
    flushes: int = 0

    def append(self, text: str, style: Style) -> None:
        if text:
            self.pending.append(Span(text, style))

    def flush(self) -> None:
        if self.pending:
            self.lines.append(Line(tuple(self.pending)))
            self.pending = []
            self.flushes += 1

    def blank(self) -> None:
        self.lines.append(Line())

    def is_balanced(self) -> bool:
        """True once every stack is back to its initial configuration."""
        return (
            self.styles.at_baseline
            and not self.lists
            and self.table is None
            and not self.open_tags
            and not self.pending
            and not self.in_code_block
        )

    def document(self) -> StyledDocument:
        return StyledDocument(tuple(self.lines))


class MarkdownRenderer:
    """Turns a parse-event stream into a StyledDocument."""

    def __init__(
        self,
        theme: Optional[Theme] = None,
        placeholder: str = BR_PLACEHOLDER,
        break_mode: BreakMode = BreakMode.MARKER,
        rule_width: int = DEFAULT_RULE_WIDTH,
        table_column_width: int = DEFAULT_TABLE_COLUMN_WIDTH,
    ):
        self.theme = theme or GITHUB_DARK
        self.placeholder = placeholder
        self.break_mode = break_mode
        self.rule_width = max(0, rule_width)
        self.table_column_width = max(1, table_column_width)

        # Open handlers do the side effects of a scope and return the style it pushes.
        self._open_handlers: Dict[Tag, Callable[[RenderContext, Start], Style]] = {
            Tag.HEADING: self._open_heading,
            Tag.PARAGRAPH: self._open_plain,
            Tag.BLOCK_QUOTE: self._open_block_quote,
            Tag.CODE_BLOCK: self._open_code_block,
            Tag.LIST: self._open_list,
            Tag.ITEM: self._open_item,
            Tag.TABLE: self._open_table,
            Tag.TABLE_HEAD: self._open_table_head,
            Tag.TABLE_ROW: self._open_table_row,
            Tag.TABLE_CELL: self._open_table_cell,
            Tag.EMPHASIS: lambda ctx, event: Style(italic=True),
            Tag.STRONG: lambda ctx, event: Style(bold=True),
            Tag.STRIKETHROUGH: lambda ctx, event: Style(strike=True),
            Tag.LINK: lambda ctx, event: self.theme.link_style,
            Tag.IMAGE: lambda ctx, event: self.theme.image_style,
        }
        self._close_handlers: Dict[Tag, Callable[[RenderContext], None]] = {
            Tag.HEADING: self._flush,
            Tag.PARAGRAPH: self._close_paragraph,
            Tag.BLOCK_QUOTE: self._flush,
            Tag.CODE_BLOCK: self._close_code_block,
            Tag.LIST: self._close_list,
            Tag.ITEM: self._flush,
            Tag.TABLE: self._close_table,
            Tag.TABLE_HEAD: self._close_table_head,
            Tag.TABLE_ROW: self._flush,
            Tag.TABLE_CELL: self._close_table_cell,
            Tag.EMPHASIS: self._noop,
            Tag.STRONG: self._noop,
            Tag.STRIKETHROUGH: self._noop,
            Tag.LINK: self._noop,
            Tag.IMAGE: self._noop,
        }
        self._leaf_handlers: Dict[type, Callable[[RenderContext, Event], None]] = {
            Text: self._on_text,
            Code: self._on_code,
            Html: self._on_html,
            SoftBreak: self._on_soft_break,
            HardBreak: lambda ctx, event: ctx.flush(),
            Rule: self._on_rule,
        }

    # ---- entry points ----
    def render(self, events: Iterable[Event]) -> StyledDocument:
        return self.run(events).document()

    def run(self, events: Iterable[Event]) -> RenderContext:
        """Process ``events`` to completion and return the final context."""
        ctx = RenderContext(styles=StyleStack(self.theme.default_style))
        for event in events:
            self.handle(ctx, event)
        self._finish(ctx)
        return ctx

    def handle(self, ctx: RenderContext, event: Event) -> None:
        if isinstance(event, Start):
            self._start(ctx, event)
        elif isinstance(event, End):
            self._end(ctx, event)
        else:
            handler = self._leaf_handlers.get(type(event))
            if handler is None:
                logger.debug("Ignoring unknown event %r", event)
                return
            handler(ctx, event)

    # ---- scope bookkeeping ----
    def _start(self, ctx: RenderContext, event: Start) -> None:
        style = self._open_handlers[event.tag](ctx, event)
        ctx.styles.push(style, replace=event.tag in BASE_REPLACING_TAGS)
        ctx.open_tags.append(event.tag)

    def _end(self, ctx: RenderContext, event: End) -> None:
        if not ctx.open_tags or ctx.open_tags[-1] is not event.tag:
            innermost = ctx.open_tags[-1].value if ctx.open_tags else None
            logger.debug("Ignoring close of %s; innermost open scope is %s", event.tag.value, innermost)
            return
        ctx.open_tags.pop()
        self._close_handlers[event.tag](ctx)
        ctx.styles.pop()

    def _finish(self, ctx: RenderContext) -> None:
        if ctx.open_tags:
            logger.warning(
                "Event stream ended with %d open scope(s): %s",
                len(ctx.open_tags),
                ", ".join(tag.value for tag in ctx.open_tags),
            )
            while ctx.open_tags:
                self._end(ctx, End(ctx.open_tags[-1]))
        ctx.flush()
        if not ctx.is_balanced():
            logger.error("Render context not balanced after completion")

    # ---- block scopes ----
    def _flush(self, ctx: RenderContext) -> None:
        ctx.flush()

    def _noop(self, ctx: RenderContext) -> None:
        pass

    def _open_plain(self, ctx: RenderContext, event: Start) -> Style:
        return Style.null()

    def _open_heading(self, ctx: RenderContext, event: Start) -> Style:
        ctx.flush()
        ctx.blank()
        return self.theme.heading_style(event.level)

    def _close_paragraph(self, ctx: RenderContext) -> None:
        ctx.flush()
        ctx.blank()

    def _open_block_quote(self, ctx: RenderContext, event: Start) -> Style:
        ctx.flush()
        ctx.append(QUOTE_MARKER, self.theme.quote_border_style)
        ctx.append(" ", self.theme.quote_border_style)
        return self.theme.quote_style

    def _on_rule(self, ctx: RenderContext, event: Rule) -> None:
        ctx.flush()
        ctx.lines.append(Line((Span(RULE_GLYPH * self.rule_width, self.theme.rule_style),)))
        ctx.blank()

    # ---- lists ----
    def _open_list(self, ctx: RenderContext, event: Start) -> Style:
        ctx.flush()
        ctx.lists.append(event.start)
        return Style.null()

    def _close_list(self, ctx: RenderContext) -> None:
        if ctx.lists:
            ctx.lists.pop()
        ctx.blank()

    def _open_item(self, ctx: RenderContext, event: Start) -> Style:
        ctx.flush()
        ctx.append(LIST_INDENT * max(len(ctx.lists) - 1, 0), ctx.styles.baseline)
        counter = ctx.lists[-1] if ctx.lists else None
        if counter is None:
            marker = BULLET
        else:
            marker = f"{counter}. "
            ctx.lists[-1] = counter + 1
        ctx.append(marker, self.theme.marker_style)
        return Style.null()

    # ---- code blocks ----
    def _open_code_block(self, ctx: RenderContext, event: Start) -> Style:
        ctx.flush()
        ctx.blank()
        header = [Span(CODE_HEADER, self.theme.border_style)]
        if event.language:
            header.append(Span(event.language, self.theme.code_label_style))
        ctx.lines.append(Line(tuple(header)))
        ctx.in_code_block = True
        return self.theme.code_block_style

    def _close_code_block(self, ctx: RenderContext) -> None:
        ctx.in_code_block = False
        ctx.lines.append(Line((Span(CODE_FOOTER, self.theme.border_style),)))
        ctx.blank()

    def _code_text(self, ctx: RenderContext, text: str) -> None:
        style = ctx.styles.current()
        border = Span(CODE_BORDER, self.theme.border_style)
        for code_line in _code_lines(restore_break_markers(text, self.placeholder)):
            spans = (border, Span(code_line, style)) if code_line else (border,)
            ctx.lines.append(Line(spans))

    # ---- tables ----
    def _open_table(self, ctx: RenderContext, event: Start) -> Style:
        ctx.flush()
        ctx.table = TableContext(alignments=tuple(event.alignments))
        ctx.lines.append(self._border_line(TABLE_TOP, [Alignment.NONE] * len(event.alignments)))
        return Style.null()

    def _close_table(self, ctx: RenderContext) -> None:
        ctx.flush()
        columns = len(ctx.table.alignments) if ctx.table else 0
        ctx.lines.append(self._border_line(TABLE_BOTTOM, [Alignment.NONE] * columns))
        ctx.table = None
        ctx.blank()

    def _open_table_head(self, ctx: RenderContext, event: Start) -> Style:
        if ctx.table is not None:
            ctx.table.in_header = True
        return Style.null()

    def _close_table_head(self, ctx: RenderContext) -> None:
        ctx.flush()
        if ctx.table is None:
            return
        ctx.table.in_header = False
        ctx.lines.append(self._border_line(TABLE_HEADER_SEPARATOR, ctx.table.alignments))

    def _open_table_row(self, ctx: RenderContext, event: Start) -> Style:
        ctx.flush()
        if ctx.table is not None:
            ctx.table.column = 0
        ctx.append(ROW_START, self.theme.border_style)
        return Style.null()

    def _open_table_cell(self, ctx: RenderContext, event: Start) -> Style:
        if ctx.table is not None:
            ctx.table.cell_start = len(ctx.pending)
            ctx.table.cell_flushes = ctx.flushes
        return Style.null()

    def _close_table_cell(self, ctx: RenderContext) -> None:
        table = ctx.table
        if table is None:
            ctx.append(CELL_SEPARATOR, self.theme.border_style)
            return
        # A break inside the cell started a new line; measure only that continuation.
        start = table.cell_start if table.cell_flushes == ctx.flushes else 0
        width = sum(span.cell_length for span in ctx.pending[start:])
        ctx.append(" " * (self.table_column_width - width), ctx.styles.current())
        last = table.column >= len(table.alignments) - 1
        ctx.append(ROW_END if last else CELL_SEPARATOR, self.theme.border_style)
        table.column += 1

    def _border_line(self, glyphs: Tuple[str, str, str], alignments: Iterable[Alignment]) -> Line:
        left, junction, right = glyphs
        style = self.theme.border_style
        spans = [Span(left, style)]
        for index, alignment in enumerate(alignments):
            if index:
                spans.append(Span(junction, style))
            spans.append(Span(self._border_segment(alignment), style))
        spans.append(Span(right, style))
        return Line(tuple(spans))

    def _border_segment(self, alignment: Alignment) -> str:
        width = self.table_column_width + 2
        if alignment is Alignment.LEFT:
            return ":" + "─" * (width - 1)
        if alignment is Alignment.RIGHT:
            return "─" * (width - 1) + ":"
        if alignment is Alignment.CENTER:
            return ":" + "─" * (width - 2) + ":"
        return "─" * width

    # ---- inline leaves ----
    def _on_text(self, ctx: RenderContext, event: Text) -> None:
        if ctx.in_code_block:
            self._code_text(ctx, event.text)
            return
        style = ctx.styles.current()
        if ctx.table is not None and ctx.table.in_header:
            style = style + Style(bold=True)
        segments = split_on_placeholder(event.text, self.placeholder)
        for index, segment in enumerate(segments):
            if index:
                self._break(ctx)
            ctx.append(segment, style)

    def _break(self, ctx: RenderContext) -> None:
        if self.break_mode is BreakMode.NEWLINE:
            ctx.flush()
        else:
            ctx.append(BREAK_MARKER_TEXT, self.theme.break_marker_style)

    def _on_code(self, ctx: RenderContext, event: Code) -> None:
        text = restore_break_markers(event.text, self.placeholder)
        ctx.append(f" {text} ", self.theme.inline_code_style)

    def _on_html(self, ctx: RenderContext, event: Html) -> None:
        ctx.append(restore_break_markers(event.text, self.placeholder), self.theme.raw_html_style)

    def _on_soft_break(self, ctx: RenderContext, event: SoftBreak) -> None:
        ctx.append(" ", ctx.styles.current())


def _code_lines(text: str) -> List[str]:
    """Split code on line feeds; a single trailing line feed does not start a new line."""
    if not text:
        return []
    if text.endswith("\n"):
        text = text[:-1]
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


def render_markdown(
    source: str,
    placeholder: str = BR_PLACEHOLDER,
    theme: Optional[Theme] = None,
    *,
    break_mode: BreakMode = BreakMode.MARKER,
    rule_width: int = DEFAULT_RULE_WIDTH,
    table_column_width: int = DEFAULT_TABLE_COLUMN_WIDTH,
) -> StyledDocument:
    """Render Markdown source text into a StyledDocument.

    Literal ``<br>``/``<BR>`` markers are protected with ``placeholder`` before
    tokenizing and restored according to ``break_mode``.
    """
    renderer = MarkdownRenderer(
        theme,
        placeholder,
        break_mode=break_mode,
        rule_width=rule_width,
        table_column_width=table_column_width,
    )
    substituted = substitute_break_markers(source, placeholder)
    return renderer.render(markdown_events(substituted))


def render_html(source: str) -> str:
    """Markdown to HTML, shown verbatim by the ``:hp`` preview command."""
    return create_parser().render(source)
