from __future__ import annotations

from typing import Any

from rich import box
from rich.table import Table
from rich.text import Text

from ..core.session import Session
from .commands import HELP_KEY, CommandRegistry

PROMPT_QUESTION = "Keep this line?"
UNKNOWN_TOTAL = "?"


def display_line(line: Any) -> str:
    """Line text for the terminal: decoded, without its terminator."""
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    return str(line).rstrip("\r\n")


def format_progress(session: Session) -> str:
    total = session.total()
    shown = UNKNOWN_TOTAL if total is None else str(total)
    return f"({session.cursor + 1}/{shown})"


def format_legend(session: Session, registry: CommandRegistry) -> str:
    default = session.default_key()
    keys = [
        key.upper() if key == default else key.lower()
        for key in registry.available_keys(session)
        if key != HELP_KEY
    ]
    return f"[{''.join(keys)}]"


def render_prompt(session: Session, registry: CommandRegistry) -> Text:
    text = Text(display_line(session.current_line()))
    text.append("\n")
    text.append(PROMPT_QUESTION, style="bold")
    text.append(" ")
    text.append(format_progress(session), style="cyan")
    text.append(" ")
    text.append(format_legend(session, registry), style="green")
    text.append("? ")
    return text


def render_help(registry: CommandRegistry) -> Table:
    table = Table(box=box.SIMPLE, show_header=False, title="Commands")
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Description")
    for command in registry.commands():
        table.add_row(command.key, command.description)
    table.add_row(
        "space",
        "Repeat the default command (shown capitalized in the prompt).",
    )
    return table
