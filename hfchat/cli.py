"""hfchat CLI - terminal chat client with markdown rendering."""

import logging
import sys

import click
from rich.style import Style

from .client import ChatClient
from .config import ConfigManager
from .repl import ChatREPL
from .ui.highlight import SyntaxRegistry
from .ui.markdown import MarkdownRenderer
from .ui.theme import DEFAULT_THEME, console


@click.group()
@click.option("--config", "config_path", default=None, help="Path to config.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path, verbose):
    """hfchat - chat with OpenAI-compatible models in the terminal.

    Chat interactively, or render markdown files the way replies are shown.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = ConfigManager(config_path)


@cli.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option(
    "--role", "-r",
    type=click.Choice(["assistant", "user", "system"]),
    default="assistant",
    help="Role whose colors to use",
)
@click.option("--theme", "-t", default=None, help="Pygments style for code blocks")
@click.pass_obj
def render(manager, source, role, theme):
    """Render a markdown file (or stdin) as styled terminal lines."""
    chat_config = manager.get_chat_config()
    registry = SyntaxRegistry(theme or chat_config.code_theme)
    renderer = MarkdownRenderer(registry=registry)
    base: Style = DEFAULT_THEME.base_style(role)

    document = renderer.render(source.read(), base)
    for line in document:
        console.print(line.to_text(), soft_wrap=True)


@cli.command()
@click.option("--model", "-m", default=None, help="Model to chat with")
@click.option("--system", "-s", default=None, help="System prompt")
@click.option("--thinking/--no-thinking", default=None, help="Show reasoning segments")
@click.pass_obj
def chat(manager, model, system, thinking):
    """Start an interactive chat session."""
    chat_config = manager.get_chat_config()
    if model:
        chat_config.model = model
    if system:
        chat_config.system_prompt = system
    if thinking is not None:
        chat_config.show_thinking = thinking

    try:
        ChatREPL(chat_config, ChatClient(chat_config)).run()
    except click.ClickException:
        raise
    except Exception as e:
        console.print(f"Error: {e}", style="dim red")
        sys.exit(1)


@cli.command(name="config")
@click.option("--model", "-m", default=None, help="Save a default model")
@click.option("--base-url", default=None, help="Save a default API base URL")
@click.option("--code-theme", default=None, help="Save a default Pygments style")
@click.pass_obj
def show_config(manager, model, base_url, code_theme):
    """Show configuration, optionally saving new defaults first."""
    chat_updates = {"model": model, "base_url": base_url}
    chat_updates = {k: v for k, v in chat_updates.items() if v}
    if chat_updates or code_theme:
        manager.data["chat"] = {**(manager.data.get("chat") or {}), **chat_updates}
        if code_theme:
            manager.data["display"] = {**(manager.data.get("display") or {}), "code_theme": code_theme}
        manager.save()
        console.print(f"Saved {manager.config_path}", style=f"dim {DEFAULT_THEME.palette.success}")

    chat_config = manager.get_chat_config()
    token = chat_config.token

    console.print(f"Config file: {manager.config_path}")
    console.print(f"Base URL: {chat_config.base_url}")
    console.print(f"Model: {chat_config.model}")
    console.print(f"Token: {token[:10]}{'...' if len(token) > 10 else ''}")
    console.print(f"Context messages: {chat_config.max_context_messages}")
    console.print(f"Code theme: {chat_config.code_theme}")


def main():
    """Entry point for the `hfchat` command."""
    cli()


if __name__ == "__main__":
    main()
