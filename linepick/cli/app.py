from __future__ import annotations

import argparse
import errno
import sys
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Callable, Iterable, Optional, Sequence

from rich.console import Console

from ..core.emitter import emit_selected
from ..core.session import LoopSignal, Session
from ..core.session_log import (
    SessionLogger,
    log_event,
    log_exception,
    log_debug,
    log_info,
    log_warning,
    set_active_logger,
)
from .commands import (
    COUNT_KEY,
    CommandRegistry,
    DispatchResult,
    DispatchStatus,
    build_registry,
)
from .prompt import render_help, render_prompt
from .terminal import ControlTerminal, TerminalUnavailable

ABORT_KEY = "q"


class LoopOutcome(str, Enum):
    FINISHED = "finished"
    ABORTED = "aborted"


class PickCLI:
    """Interactive decision loop over lines pulled from the input stream."""

    def __init__(
        self,
        lines: Iterable[Any],
        read_key: Callable[[], str],
        console: Console,
    ) -> None:
        self.session = Session.from_lines(lines)
        self.read_key = read_key
        self.console = console
        self.registry: CommandRegistry = build_registry(self._show_help)

    def run(self) -> LoopOutcome:
        log_event("loop", "loop.start")
        session = self.session
        while not session.done:
            if not session.buffer.ensure(session.cursor):
                log_event("loop", "loop.end_of_input", {"lines": len(session.buffer)})
                session.done = True
                break
            prompt = render_prompt(session, self.registry)
            log_debug("loop", "prompt", prompt.plain)
            self.console.print(prompt, end="")
            key = self.read_key()
            self.console.print()
            if key == "":
                # EOF on the terminal counts as quit.
                key = ABORT_KEY
            result = self.registry.dispatch(key, session)
            self._log_dispatch(result)
            if result.status is DispatchStatus.INVALID:
                self._warn(f"Invalid command {result.key!r}; press ? for help.")
                continue
            if result.status is DispatchStatus.UNAVAILABLE:
                self._warn(f"Command {result.key!r} is not available here.")
                continue
            if result.key == COUNT_KEY:
                log_info("loop", "count", {"total": session.total()})
            if result.signal is LoopSignal.ABORT:
                log_event("loop", "loop.abort", {"cursor": session.cursor})
                return LoopOutcome.ABORTED
            if result.signal is LoopSignal.FINISH:
                log_event("loop", "loop.finish", {"cursor": session.cursor})
                break
        return LoopOutcome.FINISHED

    def emit(self, out: BinaryIO) -> int:
        written = emit_selected(self.session.buffer, self.session.selections, out)
        log_event("emitter", "emit", {"lines": written})
        return written

    def _show_help(self) -> None:
        log_info("loop", "help")
        self.console.print(render_help(self.registry))

    def _warn(self, message: str) -> None:
        self.console.print(message, style="yellow", markup=False, highlight=False)

    def _log_dispatch(self, result: DispatchResult) -> None:
        log_event(
            "loop",
            "key",
            {
                "key": result.key,
                "status": result.status.value,
                "signal": result.signal.value,
                "cursor": self.session.cursor,
                "counted": self.session.counted,
            },
        )


def run_filter(
    stdin: BinaryIO,
    stdout: BinaryIO,
    terminal: ControlTerminal,
) -> LoopOutcome:
    """Run one filtering pass; writes to ``stdout`` only on normal completion."""
    with terminal:
        console = Console(file=terminal.writer, highlight=False, soft_wrap=True)
        cli = PickCLI(stdin, terminal.read_key, console)
        outcome = cli.run()
    if outcome is LoopOutcome.FINISHED:
        cli.emit(stdout)
    return outcome


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linepick",
        description=(
            "Interactive line filter: asks on the controlling terminal whether "
            "each stdin line should be passed to stdout."
        ),
    )
    parser.add_argument("-v", "--version", action="store_true", help="Show version and exit")
    parser.add_argument(
        "--debug",
        nargs="?",
        const="all",
        default=None,
        metavar="LEVELS",
        help="Write a debug session log (all, session, error, warn, info, debug; comma separated)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Path of the debug session log (only used with --debug)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.version:
        from linepick import __version__

        print(f"linepick {__version__}")
        return

    logger = SessionLogger(args.log_file, args.debug)
    set_active_logger(logger)
    try:
        if sys.stdin is None or sys.stdin.isatty():
            # Nothing is piped in, so there is nothing to filter.
            log_warning("cli", "stdin_is_tty")
            return
        try:
            terminal = ControlTerminal.open()
        except TerminalUnavailable as exc:
            log_warning("cli", "terminal_unavailable", str(exc))
            return
        run_filter(sys.stdin.buffer, sys.stdout.buffer, terminal)
    except TerminalUnavailable as exc:
        log_warning("cli", "terminal_unavailable", str(exc))
        return
    except BrokenPipeError:
        return
    except KeyboardInterrupt:
        return
    except OSError as exc:
        if exc.errno == errno.EPIPE:
            return
        log_exception("cli", exc)
        raise
    finally:
        logger.close()
        set_active_logger(None)


if __name__ == "__main__":
    main()
