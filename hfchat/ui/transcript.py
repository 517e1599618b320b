"""Conversation transcript lines and the scrolling viewport over them.

Every message becomes a header line, its body, and one trailing blank
line. Assistant bodies go through the markdown renderer; user and system
text is shown as-is. The viewport either stays pinned to the newest lines
or starts at a chosen message.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from rich.style import Style

from ..conversation import Message, Role
from .document import Line, Span
from .markdown import MarkdownRenderer
from .theme import DEFAULT_THEME, HfchatTheme

THINKING_RULE = "  " + "═" * 20


def plain_lines(text: str, style: Style) -> list[Line]:
    """One single-span line per newline-separated piece of ``text``."""
    return [Line.of(Span(piece, style)) for piece in text.split("\n")]


def render_message(
    message: Message,
    show_thinking: bool = False,
    renderer: Optional[MarkdownRenderer] = None,
    theme: HfchatTheme = DEFAULT_THEME,
) -> list[Line]:
    renderer = renderer or MarkdownRenderer(palette=theme.palette)
    palette = theme.palette
    role = theme.get_role(message.role.value)
    base = theme.base_style(message.role.value)
    role_style = Style(color=role.color, bold=True)

    lines = [Line.of(
        Span(role.label, role_style),
        Span(f" [{message.created_at.strftime('%H:%M:%S')}]", Style(color=palette.muted)),
        Span(":", role_style),
    )]

    if message.role is not Role.ASSISTANT:
        lines.extend(plain_lines(message.content, base))
    elif message.thinking is None:
        lines.extend(renderer.render(message.content, base))
    else:
        lines.extend(_thinking_lines(message.thinking, show_thinking, theme))
        lines.extend(line.indented("  ") for line in renderer.render(message.content, base))

    lines.append(Line())
    return lines


def _thinking_lines(thinking: str, show_thinking: bool, theme: HfchatTheme) -> list[Line]:
    color = theme.palette.thinking
    if show_thinking:
        lines = [Line.of(
            Span("  \U0001f914 ", Style(color=color)),
            Span("[Thinking Process] ", Style(color=color, bold=True)),
        )]
        reasoning = Style(color=color, italic=True, dim=True)
        lines.extend(Line.of(Span("    "), Span(piece, reasoning)) for piece in thinking.splitlines())
        lines.append(Line.of(Span(THINKING_RULE, Style(color=theme.palette.muted))))
        return lines
    if not thinking:
        return []
    return [Line.of(
        Span("  \U0001f914 ", Style(color=color, dim=True)),
        Span("[Thinking hidden - /thinking to show] ", Style(color=color, italic=True, dim=True)),
    )]


def render_transcript(
    messages: Sequence[Message],
    show_thinking: bool = False,
    renderer: Optional[MarkdownRenderer] = None,
    theme: HfchatTheme = DEFAULT_THEME,
) -> list[Line]:
    renderer = renderer or MarkdownRenderer(palette=theme.palette)
    lines: list[Line] = []
    for message in messages:
        lines.extend(render_message(message, show_thinking, renderer, theme))
    return lines


@dataclass
class Viewport:
    """Pinned to the newest lines, or scrolled to start at message ``offset``."""

    pinned: bool = True
    offset: int = 0

    def scroll_up(self) -> None:
        self.pinned = False
        self.offset = max(self.offset - 1, 0)

    def scroll_down(self) -> None:
        self.offset += 1
        self.pinned = False

    def scroll_to_bottom(self) -> None:
        self.pinned = True
        self.offset = 0

    def label(self, message_count: int) -> str:
        if not message_count:
            return ""
        if self.pinned:
            return " [BOTTOM ↓] "
        return f" [MSG {min(self.offset + 1, message_count)}/{message_count}] "


def visible_lines(
    messages: Sequence[Message],
    height: int,
    viewport: Viewport,
    show_thinking: bool = False,
    renderer: Optional[MarkdownRenderer] = None,
) -> list[Line]:
    """The window of transcript lines a ``height``-line pane should show."""
    height = max(height, 0)
    if viewport.pinned:
        lines = render_transcript(messages, show_thinking, renderer)
        return lines[len(lines) - height:] if len(lines) > height else lines
    lines = render_transcript(messages[viewport.offset:], show_thinking, renderer)
    return lines[:height]
