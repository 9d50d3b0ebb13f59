from __future__ import annotations

from enum import Enum
from typing import Dict, Iterator


class Decision(str, Enum):
    UNDECIDED = "undecided"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class SelectionState:
    """Per-line decisions keyed by buffer index; missing keys are undecided."""

    def __init__(self) -> None:
        self._decisions: Dict[int, Decision] = {}

    def __len__(self) -> int:
        return len(self._decisions)

    def set(self, index: int, decision: Decision) -> None:
        if index < 0:
            raise IndexError(f"negative line index: {index}")
        if decision is Decision.UNDECIDED:
            self._decisions.pop(index, None)
            return
        self._decisions[index] = decision

    def get(self, index: int) -> Decision:
        return self._decisions.get(index, Decision.UNDECIDED)

    def is_accepted(self, index: int) -> bool:
        return self.get(index) is Decision.ACCEPTED

    def accepted_indices(self) -> Iterator[int]:
        for index in sorted(self._decisions):
            if self._decisions[index] is Decision.ACCEPTED:
                yield index
