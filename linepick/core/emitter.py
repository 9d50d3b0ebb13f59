from __future__ import annotations

from typing import Any, BinaryIO, TextIO, Union

from .buffer import LineBuffer
from .selection import SelectionState


def emit_selected(
    buffer: LineBuffer[Any],
    selections: SelectionState,
    out: Union[BinaryIO, TextIO],
) -> int:
    """Write accepted lines to ``out`` in input order; returns how many."""
    written = 0
    for index, line in enumerate(buffer):
        if not selections.is_accepted(index):
            continue
        out.write(line)
        written += 1
    out.flush()
    return written
