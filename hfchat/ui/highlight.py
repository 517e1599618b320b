"""Bordered code block lines with syntax highlighting.

Fenced code blocks are tokenized line by line with pygments and framed in
box-drawing borders with a line-number column. Nothing here raises: an
unknown language falls back to the plain-text lexer and a line that fails
to tokenize is drawn in a flat fallback color.
"""

import logging
from typing import Optional

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name, get_lexer_for_filename
from pygments.lexers.special import TextLexer
from pygments.style import StyleMeta
from pygments.styles import get_all_styles, get_style_by_name
from pygments.util import ClassNotFound
from rich.style import Style

from .document import Line, Span
from .theme import DEFAULT_THEME, ColorPalette

_log = logging.getLogger(__name__)

DEFAULT_CODE_THEME = "monokai"
NO_LANGUAGE_LABEL = "code"

_TOP_LEFT = "╭"
_BOT_LEFT = "╰"
_VERT = "│"
_HORIZ = "─"

_LEXER_OPTIONS = {"stripnl": False, "ensurenl": False}


class SyntaxRegistry:
    """Read-only grammar and theme lookup over the installed pygments data.

    Built once and shared; nothing on it changes after construction, so
    concurrent renders may use the same instance.
    """

    def __init__(self, theme_name: str = DEFAULT_CODE_THEME, palette: Optional[ColorPalette] = None):
        self._palette = palette or DEFAULT_THEME.palette
        self._theme_name, self._theme = self.resolve_theme(theme_name)

    @property
    def palette(self) -> ColorPalette:
        return self._palette

    @property
    def theme(self) -> StyleMeta:
        return self._theme

    @property
    def theme_name(self) -> str:
        return self._theme_name

    @staticmethod
    def resolve_theme(name: str) -> tuple[str, StyleMeta]:
        """The named pygments style, or the first installed one."""
        try:
            return name, get_style_by_name(name)
        except ClassNotFound:
            fallback = next(iter(get_all_styles()))
            _log.debug("code theme %r not found, using %r", name, fallback)
            return fallback, get_style_by_name(fallback)

    @staticmethod
    def resolve_lexer(token: Optional[str]) -> Lexer:
        """Lexer for a fence language: alias, then file extension, then plain text."""
        if token:
            try:
                return get_lexer_by_name(token, **_LEXER_OPTIONS)
            except ClassNotFound:
                pass
            try:
                return get_lexer_for_filename(f"block.{token}", **_LEXER_OPTIONS)
            except ClassNotFound:
                _log.debug("no lexer for %r, using plain text", token)
        return TextLexer(**_LEXER_OPTIONS)

    def style_for_token(self, ttype) -> Style:
        """Convert a theme entry to a rich Style on the code background."""
        entry = self._theme.style_for_token(ttype)
        color = f"#{entry['color']}" if entry["color"] else None
        bgcolor = f"#{entry['bgcolor']}" if entry["bgcolor"] else self._palette.code_bg
        return Style(
            color=color,
            bgcolor=bgcolor,
            bold=entry["bold"] or None,
            italic=entry["italic"] or None,
            underline=entry["underline"] or None,
        )


DEFAULT_REGISTRY = SyntaxRegistry()


def split_source_lines(raw_text: str) -> list[str]:
    """Split on newlines; a trailing newline adds no line, trailing CR is dropped."""
    if not raw_text:
        return []
    lines = raw_text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def highlight_block(
    raw_text: str,
    language: Optional[str],
    base_style: Style,
    registry: Optional[SyntaxRegistry] = None,
) -> list[Line]:
    """Render a code block as bordered, numbered, highlighted lines.

    Args:
        raw_text: The code (without fences), newlines preserved.
        language: Fence language token, or None.
        base_style: Style of the surrounding message.
        registry: Grammar/theme lookup; the shared default when omitted.

    Returns:
        Top border, one line per source line (at least one), bottom border.
    """
    registry = registry or DEFAULT_REGISTRY
    palette = registry.palette
    frame_style = base_style + Style(color=palette.muted, bgcolor=palette.code_bg)
    fallback_style = base_style + Style(color=palette.code_fallback, bgcolor=palette.code_bg)

    label = language or NO_LANGUAGE_LABEL
    source_lines = split_source_lines(raw_text)
    number_width = max(len(str(max(len(source_lines), 1))), 2)
    lexer = registry.resolve_lexer(language)

    out = [Line.of(Span(f"{_TOP_LEFT}{_HORIZ} {label} ", frame_style))]

    for number, source in enumerate(source_lines, start=1):
        spans = [
            Span(f"{_VERT} ", frame_style),
            Span(f"{number:>{number_width}} ", frame_style),
        ]
        try:
            for ttype, value in lexer.get_tokens(source):
                if value:
                    spans.append(Span(value, registry.style_for_token(ttype)))
        except Exception:
            _log.debug("highlighting failed for line %d", number, exc_info=True)
            spans[2:] = [Span(source, fallback_style)]
        out.append(Line(tuple(spans)))

    if not source_lines:
        out.append(Line.of(
            Span(f"{_VERT} ", frame_style),
            Span(f"{1:>{number_width}} ", frame_style),
            Span(" ", base_style + Style(bgcolor=palette.code_bg)),
        ))

    out.append(Line.of(Span(f"{_BOT_LEFT}{_HORIZ}", frame_style)))
    return out
