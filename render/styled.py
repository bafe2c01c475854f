"""Styled document model: Spans grouped into Lines grouped into a StyledDocument."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

from rich.cells import cell_len
from rich.style import Style
from rich.text import Text


@dataclass(frozen=True)
class Span:
    """An immutable literal run paired with a fully resolved style."""
    text: str
    style: Style = Style.null()

    @property
    def cell_length(self) -> int:
        return cell_len(self.text)


@dataclass(frozen=True)
class Line:
    """One display row; spans are kept in left-to-right order."""
    spans: Tuple[Span, ...] = ()

    @property
    def plain(self) -> str:
        return "".join(span.text for span in self.spans)

    @property
    def cell_length(self) -> int:
        return sum(span.cell_length for span in self.spans)

    @property
    def is_blank(self) -> bool:
        return not self.plain

    def __len__(self) -> int:
        return len(self.spans)

    def __iter__(self) -> Iterator[Span]:
        return iter(self.spans)

    def to_text(self) -> Text:
        text = Text(no_wrap=True, end="")
        for span in self.spans:
            text.append(span.text, span.style)
        return text


@dataclass(frozen=True)
class StyledDocument:
    """The renderer's sole output. Never mutated by the viewer that paints it."""
    lines: Tuple[Line, ...] = ()

    @property
    def height(self) -> int:
        return len(self.lines)

    @property
    def plain(self) -> str:
        return "\n".join(line.plain for line in self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[Line]:
        return iter(self.lines)

    def __getitem__(self, index: int) -> Line:
        return self.lines[index]

    def to_text(self) -> Text:
        return self._join(self.lines)

    def window(self, offset: int, height: int) -> Text:
        """Return only the rows visible from ``offset`` in a viewport ``height`` rows tall."""
        offset = max(0, offset)
        return self._join(self.lines[offset:offset + max(0, height)])

    @staticmethod
    def _join(lines: Tuple[Line, ...]) -> Text:
        return Text("\n", end="").join(line.to_text() for line in lines)
