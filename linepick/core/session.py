from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional

from .buffer import LineBuffer, LineSource
from .selection import Decision, SelectionState


class LoopSignal(str, Enum):
    """What the decision loop should do after a command ran."""

    CONTINUE = "continue"
    FINISH = "finish"
    ABORT = "abort"


@dataclass
class Session:
    """Mutable state of one filtering pass, handed to every command."""

    buffer: LineBuffer[Any]
    selections: SelectionState = field(default_factory=SelectionState)
    cursor: int = 0
    counted: bool = False
    done: bool = False

    @classmethod
    def from_lines(cls, lines: Iterable[Any]) -> "Session":
        return cls(buffer=LineBuffer(LineSource(lines)))

    def current_line(self) -> Any:
        return self.buffer[self.cursor]

    def current_decision(self) -> Decision:
        return self.selections.get(self.cursor)

    def default_key(self) -> str:
        return "y" if self.current_decision() is Decision.ACCEPTED else "n"

    def total(self) -> Optional[int]:
        return len(self.buffer) if self.counted else None

    def decide(self, decision: Decision) -> None:
        self.selections.set(self.cursor, decision)
        self.cursor += 1

    def advance(self) -> None:
        self.cursor += 1

    def back(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1

    def count(self) -> int:
        added = self.buffer.drain()
        self.counted = True
        return added
