"""Styled document model produced by the markdown renderer.

A Document is a sequence of Lines, a Line is a sequence of Spans. A Line
with no spans is a blank line and separates paragraphs; it is not the same
thing as a Line holding one empty Span.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator

from rich.style import Style
from rich.text import Text


@dataclass(frozen=True)
class Span:
    """A run of text in a single style. Never contains a newline."""

    text: str
    style: Style = Style.null()


@dataclass(frozen=True)
class Line:
    """An ordered run of spans, rendered left to right."""

    spans: tuple[Span, ...] = ()

    @classmethod
    def of(cls, *spans: Span) -> "Line":
        return cls(tuple(spans))

    @property
    def is_blank(self) -> bool:
        return not self.spans

    @property
    def plain(self) -> str:
        return "".join(span.text for span in self.spans)

    def indented(self, prefix: str) -> "Line":
        """Return a copy with an unstyled prefix span in front."""
        return Line((Span(prefix),) + self.spans)

    def to_text(self) -> Text:
        text = Text()
        for span in self.spans:
            text.append(span.text, style=span.style)
        return text


@dataclass(frozen=True)
class Document:
    """Fully rendered output: never begins or ends with a blank line."""

    lines: tuple[Line, ...] = ()

    @classmethod
    def from_lines(cls, lines: Iterable[Line]) -> "Document":
        return cls(strip_blank_edges(lines))

    def __iter__(self) -> Iterator[Line]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __getitem__(self, index: int) -> Line:
        return self.lines[index]

    def plain_lines(self) -> list[str]:
        return [line.plain for line in self.lines]

    def to_text(self) -> Text:
        """Join all lines into one rich Text, separated by newlines."""
        return Text("\n").join(line.to_text() for line in self.lines)


def strip_blank_edges(lines: Iterable[Line]) -> tuple[Line, ...]:
    """Drop blank lines from both ends. May return an empty tuple."""
    result = list(lines)
    start = 0
    while start < len(result) and result[start].is_blank:
        start += 1
    end = len(result)
    while end > start and result[end - 1].is_blank:
        end -= 1
    return tuple(result[start:end])
