"""Terminal rendering: markdown documents, code blocks, tables, transcripts."""

from .theme import DEFAULT_THEME, ColorPalette, HfchatTheme, RoleTheme, console
from .document import Document, Line, Span
from .events import iter_events
from .highlight import DEFAULT_REGISTRY, SyntaxRegistry, highlight_block
from .table import layout_table
from .markdown import MarkdownRenderer, render
from .transcript import Viewport, render_message, render_transcript, visible_lines

__all__ = [
    "DEFAULT_THEME",
    "ColorPalette",
    "HfchatTheme",
    "RoleTheme",
    "console",
    "Document",
    "Line",
    "Span",
    "iter_events",
    "DEFAULT_REGISTRY",
    "SyntaxRegistry",
    "highlight_block",
    "layout_table",
    "MarkdownRenderer",
    "render",
    "Viewport",
    "render_message",
    "render_transcript",
    "visible_lines",
]
