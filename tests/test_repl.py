"""Tests for the chat REPL."""

from io import StringIO
from unittest.mock import MagicMock, patch

from rich.console import Console

from hfchat.client import ChatError
from hfchat.config import ChatConfig
from hfchat.conversation import Role
from hfchat.repl import ChatREPL


def _make_repl(**config):
    client = MagicMock()
    client.complete.return_value = "<thinking>hmm</thinking>**done**"
    console = Console(file=StringIO(), width=80)
    repl = ChatREPL(ChatConfig(**config), client=client, console=console)
    return repl, client


def _output(repl) -> str:
    return repl.console.file.getvalue()


def test_repl_handle_exit():
    repl, _ = _make_repl()
    assert repl.handle_command("/exit") is False
    assert repl.handle_command("/quit") is False


def test_repl_handle_regular_text():
    repl, _ = _make_repl()
    assert repl.handle_command("hello world") is True


def test_repl_handle_unknown_command():
    repl, _ = _make_repl()
    assert repl.handle_command("/foobar") is True
    assert "Unknown command: /foobar" in _output(repl)


def test_system_prompt_seeds_history():
    repl, _ = _make_repl(system_prompt="be brief")
    assert repl.conversation.messages[0].role is Role.SYSTEM


def test_send_adds_reply_and_prints_it():
    repl, client = _make_repl()
    message = repl.send("question")

    assert message.content == "**done**"
    assert message.thinking == "hmm"
    assert [m.role for m in repl.conversation.messages] == [Role.USER, Role.ASSISTANT]
    sent = client.complete.call_args[0][0]
    assert sent == [{"role": "user", "content": "question"}]
    output = _output(repl)
    assert "done" in output
    assert "**done**" not in output


def test_send_uses_truncated_context():
    repl, client = _make_repl(max_context_messages=2)
    for i in range(3):
        repl.send(f"q{i}")
    sent = client.complete.call_args[0][0]
    assert len(sent) == 2
    assert sent[-1] == {"role": "user", "content": "q2"}


def test_send_failure_pops_user_message():
    repl, client = _make_repl()
    client.complete.side_effect = ChatError("Error 401: Invalid API key. Please check your token.")
    assert repl.send("question") is None
    assert len(repl.conversation) == 0
    assert "Error 401" in _output(repl)


def test_thinking_toggle():
    repl, _ = _make_repl()
    assert repl.show_thinking is False
    repl.handle_command("/thinking")
    assert repl.show_thinking is True


def test_clear_and_stats():
    repl, _ = _make_repl()
    repl.send("q")
    repl.handle_command("/stats")
    assert "Messages: 2 (U:1 A:1)" in _output(repl)
    repl.handle_command("/clear")
    assert len(repl.conversation) == 0


def test_save_and_load(tmp_path):
    repl, _ = _make_repl()
    repl.send("q")
    path = tmp_path / "chat.json"
    repl.handle_command(f"/save {path}")
    assert path.exists()

    other, _ = _make_repl()
    other.handle_command(f"/load {path}")
    assert len(other.conversation) == 2
    assert "Loaded conversation" in _output(other)


def test_load_failure_is_reported(tmp_path):
    repl, _ = _make_repl()
    repl.handle_command(f"/load {tmp_path / 'missing.json'}")
    assert "Failed to load" in _output(repl)


def test_send_shows_loading_status():
    repl, client = _make_repl()
    with patch.object(repl.console, "status", wraps=repl.console.status) as status:
        repl.send("question")
    status.assert_called_once_with("Loading response...", spinner="dots")
    client.complete.assert_called_once()


def test_send_failure_under_status_pops_user_message():
    repl, client = _make_repl()
    client.complete.side_effect = ChatError("Connection Error: Cannot reach API.")
    with patch.object(repl.console, "status", wraps=repl.console.status) as status:
        assert repl.send("question") is None
    status.assert_called_once()
    assert len(repl.conversation) == 0


def test_messages_use_palette_colors():
    client = MagicMock()
    client.complete.side_effect = ChatError("Error 429: Rate limit exceeded. Please wait and try again.")
    console = Console(file=StringIO(), width=80, force_terminal=True, color_system="standard")
    repl = ChatREPL(ChatConfig(), client=client, console=console)

    repl.send("question")
    repl.handle_command("/clear")
    repl.handle_command("/nope")

    output = _output(repl)
    assert "\x1b[2;31m" in output
    assert "\x1b[2;32m" in output
    assert "\x1b[2;33m" in output
