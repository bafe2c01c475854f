"""Parse events consumed by the document renderer, and the markdown-it adapter producing them.

The tokenizer is markdown-it-py with the CommonMark preset plus the GFM table
and strikethrough rules. Its flat token list (block tokens with nested inline
children) is flattened into one ordered stream of open/close markers and
leaf events.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from markdown_it import MarkdownIt
from markdown_it.token import Token

logger = logging.getLogger(__name__)


class Tag(Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    BLOCK_QUOTE = "block_quote"
    CODE_BLOCK = "code_block"
    LIST = "list"
    ITEM = "item"
    TABLE = "table"
    TABLE_HEAD = "table_head"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    STRIKETHROUGH = "strikethrough"
    LINK = "link"
    IMAGE = "image"


class Alignment(Enum):
    NONE = ""
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class Start:
    """Opens a scope. Only the fields relevant to ``tag`` are set."""
    tag: Tag
    level: int = 0
    start: Optional[int] = None
    language: str = ""
    alignments: Tuple[Alignment, ...] = ()
    href: str = ""


@dataclass(frozen=True)
class End:
    tag: Tag


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Code:
    text: str


@dataclass(frozen=True)
class Html:
    text: str


@dataclass(frozen=True)
class SoftBreak:
    pass


@dataclass(frozen=True)
class HardBreak:
    pass


@dataclass(frozen=True)
class Rule:
    pass


Event = Union[Start, End, Text, Code, Html, SoftBreak, HardBreak, Rule]

# markdown-it "<name>_open" / "<name>_close" token names
_SCOPES = {
    "paragraph": Tag.PARAGRAPH,
    "heading": Tag.HEADING,
    "blockquote": Tag.BLOCK_QUOTE,
    "bullet_list": Tag.LIST,
    "ordered_list": Tag.LIST,
    "list_item": Tag.ITEM,
    "table": Tag.TABLE,
    "thead": Tag.TABLE_HEAD,
    "tr": Tag.TABLE_ROW,
    "th": Tag.TABLE_CELL,
    "td": Tag.TABLE_CELL,
    "em": Tag.EMPHASIS,
    "strong": Tag.STRONG,
    "s": Tag.STRIKETHROUGH,
    "link": Tag.LINK,
}

# Structural tokens with no counterpart in the event stream
_IGNORED = {"tbody_open", "tbody_close"}


def create_parser() -> MarkdownIt:
    """CommonMark tokenizer with tables and strikethrough enabled."""
    return MarkdownIt("commonmark").enable(["table", "strikethrough"])


def markdown_events(source: str, parser: Optional[MarkdownIt] = None) -> Iterator[Event]:
    """Tokenize ``source`` and yield its events in document order."""
    parser = parser or create_parser()
    tokens = parser.parse(source)
    yield from _block_events(tokens)


def _block_events(tokens: Sequence[Token]) -> Iterator[Event]:
    for index, token in enumerate(tokens):
        kind = token.type
        if kind in _IGNORED:
            continue
        # Paragraphs of tight list items are not separate scopes
        if token.hidden and kind in ("paragraph_open", "paragraph_close"):
            continue
        if kind == "inline":
            yield from _inline_events(token.children or [])
        elif kind in ("fence", "code_block"):
            yield Start(Tag.CODE_BLOCK, language=token.info.strip())
            yield Text(token.content)
            yield End(Tag.CODE_BLOCK)
        elif kind == "hr":
            yield Rule()
        elif kind == "html_block":
            for line in token.content.splitlines():
                yield Html(line)
                yield HardBreak()
        elif kind == "table_open":
            yield Start(Tag.TABLE, alignments=_table_alignments(tokens, index))
        elif kind == "heading_open":
            yield Start(Tag.HEADING, level=int(token.tag[1:]))
        elif kind == "ordered_list_open":
            start = token.attrGet("start")
            yield Start(Tag.LIST, start=int(start) if start is not None else 1)
        else:
            event = _scope_event(token)
            if event is not None:
                yield event


def _inline_events(children: Sequence[Token]) -> Iterator[Event]:
    for token in children:
        kind = token.type
        if kind in ("text", "text_special"):
            if token.content:
                yield Text(token.content)
        elif kind == "softbreak":
            yield SoftBreak()
        elif kind == "hardbreak":
            yield HardBreak()
        elif kind == "code_inline":
            yield Code(token.content)
        elif kind == "html_inline":
            yield Html(token.content)
        elif kind == "image":
            yield Start(Tag.IMAGE, href=str(token.attrGet("src") or ""))
            yield from _inline_events(token.children or [])
            yield End(Tag.IMAGE)
        elif kind == "link_open":
            yield Start(Tag.LINK, href=str(token.attrGet("href") or ""))
        else:
            event = _scope_event(token)
            if event is not None:
                yield event


def _scope_event(token: Token) -> Optional[Event]:
    name, _, suffix = token.type.rpartition("_")
    tag = _SCOPES.get(name)
    if tag is not None and suffix == "open":
        return Start(tag)
    if tag is not None and suffix == "close":
        return End(tag)
    logger.debug("Skipping unsupported token %s", token.type)
    return None


def _table_alignments(tokens: Sequence[Token], table_index: int) -> Tuple[Alignment, ...]:
    """Column alignments come from the ``text-align`` style of the header cells."""
    alignments: List[Alignment] = []
    for token in tokens[table_index + 1:]:
        if token.type == "thead_close":
            break
        if token.type == "th_open":
            alignments.append(_cell_alignment(token))
    return tuple(alignments)


def _cell_alignment(token: Token) -> Alignment:
    style = str(token.attrGet("style") or "")
    _, _, value = style.partition("text-align:")
    try:
        return Alignment(value.strip())
    except ValueError:
        return Alignment.NONE
