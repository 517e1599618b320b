"""hfchat - terminal chat client with markdown and code rendering."""

__version__ = "0.1.0"

from .ui.document import Document, Line, Span
from .ui.highlight import highlight_block
from .ui.markdown import MarkdownRenderer, render

__all__ = [
    "Document",
    "Line",
    "Span",
    "MarkdownRenderer",
    "highlight_block",
    "render",
]
