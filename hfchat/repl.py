"""Interactive chat REPL for hfchat."""

import logging
from typing import Optional

from rich.console import Console

from .client import ChatClient, ChatError
from .config import ChatConfig
from .conversation import Conversation, ConversationError, Message, Role
from .ui.highlight import SyntaxRegistry
from .ui.markdown import MarkdownRenderer
from .ui.theme import DEFAULT_THEME, ColorPalette, console as default_console
from .ui.transcript import render_message

_log = logging.getLogger(__name__)

DEFAULT_SAVE_FILE = "conversation.json"


class ChatREPL:
    """Interactive REPL interface for hfchat."""

    def __init__(
        self,
        config: ChatConfig,
        client: Optional[ChatClient] = None,
        console: Optional[Console] = None,
    ):
        self.config = config
        self.client = client or ChatClient(config)
        self.console = console or default_console
        self.conversation = Conversation(config.system_prompt)
        self.show_thinking = config.show_thinking
        self.renderer = MarkdownRenderer(registry=SyntaxRegistry(config.code_theme))

    @property
    def palette(self) -> ColorPalette:
        return DEFAULT_THEME.palette

    @property
    def accent(self) -> str:
        return self.palette.accent

    def welcome(self):
        """Show welcome message."""
        self.console.print("\nhfchat", style=f"bold {self.accent}")
        self.console.print(f"Model: {self.config.model} @ {self.config.base_url}", style="dim")
        self.console.print("Type /help for commands.\n", style="dim")

    def show_help(self):
        """Show a dedicated help screen listing all commands."""
        self.console.print("\nCommands:", style=f"bold {self.accent}")
        self.console.print("  /help            - Show this help")
        self.console.print("  /clear           - Clear the conversation")
        self.console.print("  /stats           - Message counts and estimated tokens")
        self.console.print(f"  /save [file]     - Save the conversation (default {DEFAULT_SAVE_FILE})")
        self.console.print(f"  /load [file]     - Load a conversation (default {DEFAULT_SAVE_FILE})")
        self.console.print("  /thinking        - Toggle reasoning display")
        self.console.print("  /exit, /quit     - Exit hfchat")
        self.console.print("\nOtherwise, just type your message!\n", style="dim")

    def print_message(self, message: Message) -> None:
        for line in render_message(message, self.show_thinking, self.renderer):
            self.console.print(line.to_text())

    def show_stats(self) -> None:
        stats = self.conversation.stats()
        self.console.print(
            f"Messages: {stats['total']} (U:{stats['user']} A:{stats['assistant']}) "
            f"| ~{stats['tokens']} tokens",
            style=f"dim {self.accent}",
        )

    def handle_command(self, line: str) -> bool:
        """Handle special commands. Returns True to continue, False to exit."""
        if not line.startswith("/"):
            return True

        parts = line.strip().split(None, 1)
        cmd = parts[0].lstrip("/").lower()
        arg = parts[1].strip() if len(parts) > 1 else ""

        if cmd in ("exit", "quit", "q"):
            return False

        elif cmd in ("help", "h"):
            self.show_help()

        elif cmd in ("clear", "c"):
            self.conversation.clear()
            self.console.print("Conversation cleared", style=f"dim {self.palette.success}")

        elif cmd in ("stats", "s"):
            self.show_stats()

        elif cmd == "save":
            try:
                path = self.conversation.save(arg or DEFAULT_SAVE_FILE)
                self.console.print(f"Saved conversation to {path}", style=f"dim {self.palette.success}")
            except ConversationError as e:
                self.console.print(f"Failed to save: {e}", style=f"dim {self.palette.error}")

        elif cmd == "load":
            try:
                path = self.conversation.load(arg or DEFAULT_SAVE_FILE)
                self.console.print(f"Loaded conversation from {path}", style=f"dim {self.palette.success}")
                for message in self.conversation.messages:
                    self.print_message(message)
            except ConversationError as e:
                self.console.print(f"Failed to load: {e}", style=f"dim {self.palette.error}")

        elif cmd in ("thinking", "t"):
            self.show_thinking = not self.show_thinking
            state = "shown" if self.show_thinking else "hidden"
            self.console.print(f"Reasoning {state}", style="dim")

        else:
            self.console.print(f"Unknown command: /{cmd}", style=f"dim {self.palette.warning}")

        return True

    def send(self, text: str) -> Optional[Message]:
        """Send a user message and print the reply. Returns the reply message."""
        self.conversation.add(Role.USER, text)
        try:
            with self.console.status("Loading response...", spinner="dots"):
                reply = self.client.complete(
                    self.conversation.context(self.config.max_context_messages)
                )
        except ChatError as e:
            self.conversation.pop_last_user()
            self.console.print(f"✗ {e}", style=f"dim {self.palette.error}")
            return None

        message = self.conversation.add(Role.ASSISTANT, reply)
        self.print_message(message)
        return message

    def run(self):
        """Start the REPL loop."""
        self.welcome()

        try:
            while True:
                try:
                    line = self.console.input(f"[{self.accent}]> [/]")

                    if not line.strip():
                        continue

                    if not self.handle_command(line):
                        break

                    if not line.startswith("/"):
                        self.send(line)

                except KeyboardInterrupt:
                    self.console.print("\n")
                    continue

        except EOFError:
            pass
        finally:
            self.client.close()
