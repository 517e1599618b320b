"""Conversation history: messages, reasoning extraction, context window, persistence.

Saved conversations are a JSON list of message objects:
  role        - "user", "assistant" or "system"
  content     - the message text (for assistant replies, without reasoning)
  thinking    - the extracted reasoning text, or null
  created_at  - ISO-8601 timestamp
"""

import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import NamedTuple, Optional, Sequence


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ConversationError(Exception):
    """A saved conversation could not be read or written."""


@dataclass
class Message:
    """One entry in the conversation history."""

    role: Role
    content: str
    thinking: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "content": self.content,
            "thinking": self.thinking,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Message":
        return cls(
            role=Role(data["role"]),
            content=str(data["content"]),
            thinking=data.get("thinking"),
            created_at=datetime.fromisoformat(data["created_at"]) if data.get("created_at") else datetime.now(),
        )


class ThinkingSplit(NamedTuple):
    """An assistant reply split into its reasoning and visible output."""

    thinking: Optional[str]
    output: str


_THINKING = re.compile(
    r"<thinking>.*?</thinking>"
    r"|\[THINKING\].*?\[/THINKING\]"
    r"|\U0001f914\s*Thinking:.*?(?:\n\n|\Z)",
    re.DOTALL,
)
_THINKING_MARKERS = re.compile(
    r"</?thinking>|\[/?THINKING\]|\U0001f914\s*Thinking:"
)


def extract_thinking(reply: str) -> ThinkingSplit:
    """Split the first reasoning segment off an assistant reply.

    Recognizes ``<thinking>...</thinking>``, ``[THINKING]...[/THINKING]`` and
    a ``🤔 Thinking:`` paragraph. When nothing is found, or nothing would be
    left after removing the segment, the reply is returned untouched with
    ``thinking`` set to None.
    """
    match = _THINKING.search(reply)
    if match is None:
        return ThinkingSplit(None, reply)

    segment = match.group(0)
    output = reply.replace(segment, "").strip()
    if not output:
        return ThinkingSplit(None, reply)

    thinking = _THINKING_MARKERS.sub("", segment).strip()
    return ThinkingSplit(thinking, output)


def truncate_context(messages: Sequence[Message], max_messages: int) -> list[Message]:
    """Bound the history sent upstream to ``max_messages`` entries.

    A leading system message is always kept; the rest of the budget goes to
    the most recent messages.
    """
    max_messages = max(max_messages, 1)
    if len(messages) <= max_messages:
        return list(messages)

    if messages[0].role is Role.SYSTEM:
        start = max(len(messages) - (max_messages - 1), 1)
        return [messages[0], *messages[start:]]
    return list(messages[len(messages) - max_messages:])


def to_api_messages(messages: Sequence[Message]) -> list[dict]:
    """Chat-completion payload entries; reasoning is never sent back."""
    return [{"role": m.role.value, "content": m.content} for m in messages]


def estimate_tokens(text: str) -> int:
    """Rough token count: four characters per token."""
    return len(text) // 4


class Conversation:
    """Ordered message history for one chat session."""

    def __init__(self, system_prompt: Optional[str] = None):
        self.messages: list[Message] = []
        if system_prompt:
            self.add(Role.SYSTEM, system_prompt)

    def __len__(self) -> int:
        return len(self.messages)

    def add(self, role: Role, text: str) -> Message:
        """Append a message. Assistant replies have their reasoning split off."""
        if role is Role.ASSISTANT:
            thinking, output = extract_thinking(text)
            message = Message(role, output, thinking=thinking)
        else:
            message = Message(role, text)
        self.messages.append(message)
        return message

    def pop_last_user(self) -> Optional[Message]:
        """Drop the trailing user message (e.g. after a failed send)."""
        if self.messages and self.messages[-1].role is Role.USER:
            return self.messages.pop()
        return None

    def clear(self) -> None:
        self.messages.clear()

    def context(self, max_messages: int) -> list[dict]:
        """API payload for the bounded context window."""
        return to_api_messages(truncate_context(self.messages, max_messages))

    def stats(self) -> dict:
        """Message counts and an estimated token total over all content."""
        total_chars = 0
        tokens = 0
        for m in self.messages:
            text = m.content + (m.thinking or "")
            total_chars += len(text)
            tokens += estimate_tokens(text)
        return {
            "total": len(self.messages),
            "user": sum(1 for m in self.messages if m.role is Role.USER),
            "assistant": sum(1 for m in self.messages if m.role is Role.ASSISTANT),
            "chars": total_chars,
            "tokens": tokens,
        }

    def save(self, path: str) -> Path:
        """Write the history as JSON. Returns the resolved path."""
        target = Path(path).expanduser()
        try:
            target.write_text(
                json.dumps([m.to_dict() for m in self.messages], indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            raise ConversationError(f"cannot write {target}: {e}") from e
        return target

    def load(self, path: str) -> Path:
        """Replace the history with the one saved at ``path``."""
        source = Path(path).expanduser()
        try:
            data = json.loads(source.read_text(encoding="utf-8"))
            messages = [Message.from_dict(entry) for entry in data]
        except OSError as e:
            raise ConversationError(f"cannot read {source}: {e}") from e
        except (ValueError, KeyError, TypeError) as e:
            raise ConversationError(f"{source} is not a saved conversation: {e}") from e
        self.messages = messages
        return source
