"""Markdown to styled-line renderer.

A single forward fold over the markdown event stream. Inline events build
up the current line; block boundaries flush it into the document. Fenced
code blocks are handed to the highlight module, tables are buffered and
laid out by the table module once they close.
"""

from dataclasses import dataclass, field
from typing import Optional

from rich.style import Style

from . import events as ev
from .document import Document, Line, Span
from .highlight import SyntaxRegistry, highlight_block
from .table import layout_table
from .theme import DEFAULT_THEME, ColorPalette

BULLET = "• "
LIST_INDENT = "  "
HEADING_PREFIXES = {1: "# ", 2: "## ", 3: "### "}
DEEPEST_HEADING_PREFIX = "#### "


@dataclass
class CodeCapture:
    language: Optional[str] = None
    buffer: str = ""


@dataclass
class TableCapture:
    rows: list[list[str]] = field(default_factory=list)
    row: list[str] = field(default_factory=list)
    cell: str = ""
    in_cell: bool = False
    header_rows: int = 0


@dataclass
class RenderState:
    """Everything one render call accumulates. Discarded on return."""

    lines: list[Line] = field(default_factory=list)
    current: list[Span] = field(default_factory=list)
    bold: bool = False
    italic: bool = False
    link_url: Optional[str] = None
    list_depth: int = 0
    code: Optional[CodeCapture] = None
    table: Optional[TableCapture] = None

    def flush(self) -> None:
        """Move the current line into the document, even if it is empty."""
        self.lines.append(Line(tuple(self.current)))
        self.current = []

    def flush_pending(self) -> None:
        if self.current:
            self.flush()

    def blank(self) -> None:
        self.lines.append(Line())

    @property
    def in_cell(self) -> bool:
        return self.table is not None and self.table.in_cell


class MarkdownRenderer:
    """Renders markdown text into a Document of styled lines.

    Holds only read-only collaborators, so one instance can serve any
    number of concurrent render calls.
    """

    def __init__(
        self,
        registry: Optional[SyntaxRegistry] = None,
        palette: Optional[ColorPalette] = None,
    ):
        self.registry = registry
        self.palette = palette or DEFAULT_THEME.palette

    def render(self, markdown_text: str, base_style: Style) -> Document:
        state = RenderState()
        for event in ev.iter_events(markdown_text):
            self._apply(state, event, base_style)
        state.flush_pending()
        return Document.from_lines(state.lines)

    def _apply(self, state: RenderState, event: ev.Event, base: Style) -> None:
        if isinstance(event, ev.Start):
            self._start(state, event, base)
        elif isinstance(event, ev.End):
            self._end(state, event.tag, base)
        elif isinstance(event, ev.Text):
            self._text(state, event.text, base)
        elif isinstance(event, ev.Code):
            self._code(state, event.text, base)
        elif isinstance(event, (ev.SoftBreak, ev.HardBreak)):
            self._break(state, hard=isinstance(event, ev.HardBreak))
        elif not isinstance(event, ev.IGNORED_LEAVES):
            raise TypeError(f"unknown markdown event {event!r}")

    # -- structure --

    def _start(self, state: RenderState, event: ev.Start, base: Style) -> None:
        tag = event.tag
        if tag is ev.Tag.HEADING:
            state.flush_pending()
            prefix = HEADING_PREFIXES.get(event.level or 1, DEEPEST_HEADING_PREFIX)
            state.current.append(Span(prefix, base + Style(color=self.palette.accent, bold=True)))
        elif tag is ev.Tag.PARAGRAPH:
            state.flush_pending()
        elif tag is ev.Tag.EMPHASIS:
            state.italic = True
        elif tag is ev.Tag.STRONG:
            state.bold = True
        elif tag is ev.Tag.LIST:
            state.list_depth += 1
            state.flush_pending()
        elif tag is ev.Tag.ITEM:
            indent = LIST_INDENT * max(state.list_depth - 1, 0)
            state.current.append(Span(f"{indent}{BULLET}"))
        elif tag is ev.Tag.LINK:
            state.link_url = event.url or ""
        elif tag is ev.Tag.CODE_BLOCK:
            state.flush_pending()
            state.code = CodeCapture(language=event.language)
        elif tag is ev.Tag.TABLE:
            state.table = TableCapture()
        elif tag is ev.Tag.TABLE_CELL:
            if state.table is not None:
                state.table.in_cell = True
                state.table.cell = ""
        elif tag is ev.Tag.TABLE_ROW:
            if state.table is not None:
                state.table.row = []
        elif tag not in ev.IGNORED_TAGS and tag is not ev.Tag.TABLE_HEAD:
            raise TypeError(f"unhandled markdown tag {tag!r}")

    def _end(self, state: RenderState, tag: ev.Tag, base: Style) -> None:
        if tag is ev.Tag.HEADING:
            state.flush()
        elif tag is ev.Tag.PARAGRAPH:
            state.flush_pending()
            state.blank()
        elif tag is ev.Tag.EMPHASIS:
            state.italic = False
        elif tag is ev.Tag.STRONG:
            state.bold = False
        elif tag is ev.Tag.LIST:
            state.list_depth = max(state.list_depth - 1, 0)
            state.flush_pending()
        elif tag is ev.Tag.ITEM:
            state.flush()
        elif tag is ev.Tag.LINK:
            if state.link_url is not None:
                state.current.append(Span(f" <{state.link_url}>", base + Style(color=self.palette.muted)))
            state.link_url = None
        elif tag is ev.Tag.CODE_BLOCK:
            self._end_code_block(state, base)
        elif tag in (ev.Tag.TABLE_CELL, ev.Tag.TABLE_ROW, ev.Tag.TABLE_HEAD, ev.Tag.TABLE):
            self._end_table_part(state, tag, base)
        elif tag not in ev.IGNORED_TAGS:
            raise TypeError(f"unhandled markdown tag {tag!r}")

    def _end_code_block(self, state: RenderState, base: Style) -> None:
        code, state.code = state.code, None
        if code is None:
            return
        state.lines.extend(highlight_block(code.buffer, code.language, base, self.registry))
        state.flush_pending()

    def _end_table_part(self, state: RenderState, tag: ev.Tag, base: Style) -> None:
        table = state.table
        if table is None:
            return
        if tag is ev.Tag.TABLE_CELL:
            table.in_cell = False
            table.row.append(table.cell.strip())
            table.cell = ""
        elif tag is ev.Tag.TABLE_ROW:
            if table.row:
                table.rows.append(table.row)
                table.row = []
        elif tag is ev.Tag.TABLE_HEAD:
            table.header_rows = len(table.rows)
        else:
            state.flush_pending()
            state.lines.extend(layout_table(table.rows, table.header_rows, base, self.palette))
            state.blank()
            state.table = None

    # -- leaves --

    def _inline_style(self, state: RenderState, base: Style) -> Style:
        style = base + Style(bold=state.bold or None, italic=state.italic or None)
        if state.link_url is not None:
            style += Style(color=self.palette.link, underline=True)
        return style

    def _text(self, state: RenderState, text: str, base: Style) -> None:
        if state.code is not None:
            state.code.buffer += text
            return
        if state.in_cell:
            state.table.cell += text
            return

        style = self._inline_style(state, base)
        for i, segment in enumerate(text.split("\n")):
            if i > 0:
                state.flush()
            if segment:
                state.current.append(Span(segment, style))

    def _code(self, state: RenderState, text: str, base: Style) -> None:
        if state.in_cell:
            state.table.cell += text
            return
        style = base + Style(color=self.palette.inline_code, bgcolor=self.palette.code_bg)
        state.current.append(Span(f" {text} ", style))

    def _break(self, state: RenderState, hard: bool) -> None:
        if state.in_cell:
            state.table.cell += " "
        elif hard:
            state.flush()
        else:
            state.current.append(Span(" "))


_default_renderer = MarkdownRenderer()


def render(markdown_text: str, base_style: Style = Style.null()) -> Document:
    """Render markdown text into a Document using the shared default renderer."""
    return _default_renderer.render(markdown_text, base_style)
