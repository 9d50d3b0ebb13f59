"""Interactive command-line front end."""

from .app import LoopOutcome, PickCLI, main, run_filter
from .commands import Command, CommandRegistry, build_registry
from .terminal import ControlTerminal, TerminalUnavailable

__all__ = [
    "Command",
    "CommandRegistry",
    "ControlTerminal",
    "LoopOutcome",
    "PickCLI",
    "TerminalUnavailable",
    "build_registry",
    "main",
    "run_filter",
]
