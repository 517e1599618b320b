"""Markdown event stream.

Flattens the markdown-it token tree into a closed set of Start/End and leaf
events so the renderer can fold over them in a single forward pass. Every
token kind markdown-it produces with tables and strikethrough enabled maps
to exactly one of the event types below.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional, Sequence, Union

from markdown_it import MarkdownIt
from markdown_it.token import Token

_log = logging.getLogger(__name__)


class Tag(Enum):
    HEADING = auto()
    PARAGRAPH = auto()
    EMPHASIS = auto()
    STRONG = auto()
    LIST = auto()
    ITEM = auto()
    LINK = auto()
    CODE_BLOCK = auto()
    TABLE = auto()
    TABLE_HEAD = auto()
    TABLE_BODY = auto()
    TABLE_ROW = auto()
    TABLE_CELL = auto()
    BLOCK_QUOTE = auto()
    STRIKETHROUGH = auto()
    IMAGE = auto()


# Tags the renderer passes over; their inner leaves are still rendered.
IGNORED_TAGS = frozenset({
    Tag.TABLE_BODY,
    Tag.BLOCK_QUOTE,
    Tag.STRIKETHROUGH,
    Tag.IMAGE,
})


@dataclass(frozen=True)
class Start:
    tag: Tag
    level: Optional[int] = None
    url: Optional[str] = None
    language: Optional[str] = None


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
class SoftBreak:
    pass


@dataclass(frozen=True)
class HardBreak:
    pass


@dataclass(frozen=True)
class Html:
    text: str


@dataclass(frozen=True)
class Rule:
    pass


Event = Union[Start, End, Text, Code, SoftBreak, HardBreak, Html, Rule]

# Leaf kinds the renderer passes over.
IGNORED_LEAVES = (Html, Rule)

# markdown-it "<name>_open" / "<name>_close" prefixes and the tag they bracket
_PAIRED = {
    "paragraph": Tag.PARAGRAPH,
    "heading": Tag.HEADING,
    "bullet_list": Tag.LIST,
    "ordered_list": Tag.LIST,
    "list_item": Tag.ITEM,
    "blockquote": Tag.BLOCK_QUOTE,
    "table": Tag.TABLE,
    "thead": Tag.TABLE_HEAD,
    "tbody": Tag.TABLE_BODY,
    "tr": Tag.TABLE_ROW,
    "th": Tag.TABLE_CELL,
    "td": Tag.TABLE_CELL,
    "em": Tag.EMPHASIS,
    "strong": Tag.STRONG,
    "s": Tag.STRIKETHROUGH,
    "link": Tag.LINK,
}

_parser = MarkdownIt("commonmark").enable(["table", "strikethrough"])


def fence_language(info: str) -> Optional[str]:
    """First word of a fence info string, or None when there is none."""
    words = info.split()
    return words[0] if words else None


def iter_events(markdown_text: str) -> Iterator[Event]:
    """Yield the event stream for a block of markdown text."""
    yield from _walk(_parser.parse(markdown_text))


def _walk(tokens: Sequence[Token]) -> Iterator[Event]:
    for token in tokens:
        kind = token.type

        if kind == "inline":
            yield from _walk(token.children or [])
            continue

        if kind in ("fence", "code_block"):
            language = fence_language(token.info) if kind == "fence" else None
            yield Start(Tag.CODE_BLOCK, language=language)
            if token.content:
                yield Text(token.content)
            yield End(Tag.CODE_BLOCK)
            continue

        if kind in ("text", "text_special"):
            yield Text(token.content)
        elif kind == "code_inline":
            yield Code(token.content)
        elif kind == "softbreak":
            yield SoftBreak()
        elif kind == "hardbreak":
            yield HardBreak()
        elif kind in ("html_block", "html_inline"):
            yield Html(token.content)
        elif kind == "hr":
            yield Rule()
        elif kind == "image":
            yield Start(Tag.IMAGE, url=str(token.attrGet("src") or ""))
            yield from _walk(token.children or [])
            yield End(Tag.IMAGE)
        elif kind.endswith("_open") or kind.endswith("_close"):
            yield from _paired(token)
        else:
            _log.debug("skipping markdown token %r", kind)


def _paired(token: Token) -> Iterator[Event]:
    name, _, edge = token.type.rpartition("_")
    tag = _PAIRED.get(name)
    if tag is None:
        _log.debug("skipping markdown token %r", token.type)
        return
    # Tight list items wrap their text in hidden paragraphs.
    if tag is Tag.PARAGRAPH and token.hidden:
        return

    if edge == "close":
        yield End(tag)
    elif tag is Tag.HEADING:
        yield Start(tag, level=int(token.tag[1:]))
    elif tag is Tag.LINK:
        yield Start(tag, url=str(token.attrGet("href") or ""))
    else:
        yield Start(tag)
