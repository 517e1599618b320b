"""Whitespace-aligned table lines for markdown tables."""

from typing import Sequence

from rich.style import Style

from .document import Line, Span
from .theme import DEFAULT_THEME, ColorPalette

CELL_SEPARATOR = " | "
RULE_SEPARATOR = "-+-"


def column_widths(rows: Sequence[Sequence[str]]) -> list[int]:
    """Longest cell per column; short rows count as empty cells."""
    col_count = max((len(row) for row in rows), default=0)
    widths = [0] * col_count
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    return widths


def layout_table(
    rows: Sequence[Sequence[str]],
    header_rows: int,
    base_style: Style,
    palette: ColorPalette = DEFAULT_THEME.palette,
) -> list[Line]:
    """Lay out buffered table rows as one Line per row.

    Header rows (the first ``header_rows``) are bold in the accent color and
    followed by a dashed separator line; body rows use the base style.
    """
    if not rows:
        return []

    widths = column_widths(rows)
    header_style = base_style + Style(color=palette.accent, bgcolor=palette.code_bg, bold=True)
    row_style = base_style + Style(bgcolor=palette.code_bg)
    rule_style = base_style + Style(color=palette.muted, bgcolor=palette.code_bg)

    lines = []
    for idx, row in enumerate(rows):
        cells = [
            (row[col] if col < len(row) else "").ljust(width)
            for col, width in enumerate(widths)
        ]
        style = header_style if idx < header_rows else row_style
        lines.append(Line.of(Span(CELL_SEPARATOR.join(cells), style)))

        if idx + 1 == header_rows:
            rule = RULE_SEPARATOR.join("-" * max(width, 1) for width in widths)
            lines.append(Line.of(Span(rule, rule_style)))

    return lines
