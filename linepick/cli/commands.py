from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from ..core.selection import Decision
from ..core.session import LoopSignal, Session

CommandAction = Callable[[Session], LoopSignal]
CommandPredicate = Callable[[Session], bool]

DEFAULT_KEY = " "
HELP_KEY = "?"
COUNT_KEY = "c"


@dataclass(frozen=True)
class Command:
    key: str
    action: CommandAction
    description: str
    available: Optional[CommandPredicate] = None

    def is_available(self, session: Session) -> bool:
        if self.available is None:
            return True
        return self.available(session)


class DispatchStatus(str, Enum):
    RAN = "ran"
    INVALID = "invalid"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class DispatchResult:
    key: str
    status: DispatchStatus
    signal: LoopSignal = LoopSignal.CONTINUE


class CommandRegistry:
    """Registry for single-key commands."""

    def __init__(self) -> None:
        self._commands: Dict[str, Command] = {}

    def register(
        self,
        key: str,
        action: CommandAction,
        description: str,
        *,
        available: Optional[CommandPredicate] = None,
    ) -> None:
        if len(key) != 1:
            raise ValueError(f"command keys are single characters, got {key!r}")
        if key == DEFAULT_KEY:
            raise ValueError("the space key is reserved for the default command")
        self._commands[key] = Command(
            key=key, action=action, description=description, available=available
        )

    def get(self, key: str) -> Optional[Command]:
        return self._commands.get(key)

    def keys(self) -> List[str]:
        return sorted(self._commands)

    def available_keys(self, session: Session) -> List[str]:
        return [key for key in self.keys() if self._commands[key].is_available(session)]

    def commands(self) -> List[Command]:
        return [self._commands[key] for key in self.keys()]

    def dispatch(self, key: str, session: Session) -> DispatchResult:
        if key == DEFAULT_KEY:
            key = session.default_key()
        command = self._commands.get(key)
        if command is None:
            return DispatchResult(key=key, status=DispatchStatus.INVALID)
        if not command.is_available(session):
            return DispatchResult(key=key, status=DispatchStatus.UNAVAILABLE)
        signal = command.action(session)
        return DispatchResult(key=key, status=DispatchStatus.RAN, signal=signal)


def _advance(session: Session) -> LoopSignal:
    session.advance()
    return LoopSignal.CONTINUE


def _back(session: Session) -> LoopSignal:
    session.back()
    return LoopSignal.CONTINUE


def _accept(session: Session) -> LoopSignal:
    session.decide(Decision.ACCEPTED)
    return LoopSignal.CONTINUE


def _reject(session: Session) -> LoopSignal:
    session.decide(Decision.REJECTED)
    return LoopSignal.CONTINUE


def _finish(session: Session) -> LoopSignal:
    session.done = True
    return LoopSignal.FINISH


def _abort(session: Session) -> LoopSignal:
    session.done = True
    return LoopSignal.ABORT


def _count(session: Session) -> LoopSignal:
    session.count()
    return LoopSignal.CONTINUE


def build_registry(show_help: Callable[[], None]) -> CommandRegistry:
    """Register the fixed command set; ``show_help`` prints the help listing."""

    def _help(session: Session) -> LoopSignal:  # noqa: ARG001
        show_help()
        return LoopSignal.CONTINUE

    registry = CommandRegistry()
    registry.register("j", _advance, "Skip this line for now without deciding.")
    registry.register(
        "k",
        _back,
        "Go back to the previous line.",
        available=lambda session: session.cursor > 0,
    )
    registry.register("y", _accept, "Keep this line and move to the next one.")
    registry.register("n", _reject, "Drop this line and move to the next one.")
    registry.register(
        "d", _finish, "Done: stop here and drop this and all remaining undecided lines."
    )
    registry.register("q", _abort, "Quit without writing any output.")
    registry.register(
        COUNT_KEY,
        _count,
        "Count the remaining input so the total is shown.",
        available=lambda session: not session.counted,
    )
    registry.register(HELP_KEY, _help, "Show this help.")
    return registry
