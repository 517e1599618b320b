"""Tests for hfchat.conversation."""

import json

import pytest

from hfchat.conversation import (
    Conversation,
    ConversationError,
    Message,
    Role,
    estimate_tokens,
    extract_thinking,
    to_api_messages,
    truncate_context,
)


class TestExtractThinking:
    def test_plain_reply(self):
        split = extract_thinking("just an answer")
        assert split.thinking is None
        assert split.output == "just an answer"

    def test_xml_tags(self):
        split = extract_thinking("<thinking>\nstep one\n</thinking>\n\nThe answer is 4.")
        assert split.thinking == "step one"
        assert split.output == "The answer is 4."

    def test_bracket_tags(self):
        split = extract_thinking("[THINKING]hmm[/THINKING] Done.")
        assert split.thinking == "hmm"
        assert split.output == "Done."

    def test_emoji_paragraph(self):
        split = extract_thinking("\U0001f914 Thinking: consider x\n\nResult: y")
        assert split.thinking == "consider x"
        assert split.output == "Result: y"

    def test_only_reasoning_is_left_alone(self):
        reply = "<thinking>all reasoning</thinking>"
        split = extract_thinking(reply)
        assert split.thinking is None
        assert split.output == reply

    def test_first_segment_only(self):
        split = extract_thinking("<thinking>a</thinking>x<thinking>b</thinking>")
        assert split.thinking == "a"
        assert split.output == "x<thinking>b</thinking>"


def _history(*roles: Role) -> list[Message]:
    return [Message(role, f"m{i}") for i, role in enumerate(roles)]


class TestTruncateContext:
    def test_short_history_untouched(self):
        history = _history(Role.USER, Role.ASSISTANT)
        assert truncate_context(history, 5) == history

    def test_keeps_system_message(self):
        history = _history(Role.SYSTEM, *[Role.USER, Role.ASSISTANT] * 5)
        result = truncate_context(history, 4)
        assert len(result) == 4
        assert result[0] is history[0]
        assert result[1:] == history[-3:]

    def test_without_system_keeps_most_recent(self):
        history = _history(*[Role.USER, Role.ASSISTANT] * 5)
        result = truncate_context(history, 3)
        assert result == history[-3:]

    def test_system_not_first_is_not_special(self):
        history = _history(Role.USER, Role.SYSTEM, Role.USER, Role.ASSISTANT)
        assert truncate_context(history, 2) == history[-2:]

    def test_max_one_with_system(self):
        history = _history(Role.SYSTEM, Role.USER, Role.ASSISTANT)
        assert truncate_context(history, 1) == [history[0]]

    def test_zero_treated_as_one(self):
        history = _history(Role.USER, Role.ASSISTANT)
        assert truncate_context(history, 0) == history[-1:]


def test_to_api_messages_drops_thinking():
    msg = Message(Role.ASSISTANT, "answer", thinking="secret")
    assert to_api_messages([msg]) == [{"role": "assistant", "content": "answer"}]


def test_estimate_tokens_counts_content():
    assert estimate_tokens("") == 0
    assert estimate_tokens("a" * 400) == 100


class TestConversation:
    def test_system_prompt_first(self):
        conv = Conversation("be brief")
        assert conv.messages[0].role is Role.SYSTEM

    def test_assistant_reply_is_split(self):
        conv = Conversation()
        msg = conv.add(Role.ASSISTANT, "<thinking>why</thinking>because")
        assert msg.thinking == "why"
        assert msg.content == "because"

    def test_user_text_is_not_split(self):
        conv = Conversation()
        msg = conv.add(Role.USER, "<thinking>x</thinking>y")
        assert msg.thinking is None

    def test_pop_last_user(self):
        conv = Conversation()
        conv.add(Role.USER, "hi")
        assert conv.pop_last_user().content == "hi"
        assert conv.pop_last_user() is None

    def test_context_is_truncated(self):
        conv = Conversation("sys")
        for i in range(10):
            conv.add(Role.USER, f"q{i}")
        payload = conv.context(3)
        assert [m["content"] for m in payload] == ["sys", "q8", "q9"]

    def test_stats(self):
        conv = Conversation()
        conv.add(Role.USER, "a" * 8)
        conv.add(Role.ASSISTANT, "b" * 8)
        stats = conv.stats()
        assert stats["total"] == 2
        assert stats["user"] == 1
        assert stats["assistant"] == 1
        assert stats["chars"] == 16
        assert stats["tokens"] == 4

    def test_save_and_load(self, tmp_path):
        conv = Conversation("sys")
        conv.add(Role.USER, "question")
        conv.add(Role.ASSISTANT, "<thinking>t</thinking>answer")
        path = conv.save(str(tmp_path / "conv.json"))

        data = json.loads(path.read_text())
        assert [m["role"] for m in data] == ["system", "user", "assistant"]

        loaded = Conversation()
        loaded.load(str(path))
        assert len(loaded) == 3
        assert loaded.messages[2].thinking == "t"
        assert loaded.messages[2].content == "answer"
        assert loaded.messages[1].created_at == conv.messages[1].created_at

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConversationError):
            Conversation().load(str(tmp_path / "missing.json"))

    def test_load_bad_file_keeps_history(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"not": "a list"}')
        conv = Conversation()
        conv.add(Role.USER, "keep me")
        with pytest.raises(ConversationError):
            conv.load(str(bad))
        assert conv.messages[0].content == "keep me"

    def test_clear(self):
        conv = Conversation("sys")
        conv.clear()
        assert len(conv) == 0
