from __future__ import annotations

from typing import Generic, Iterable, Iterator, List, Optional, TypeVar

LineT = TypeVar("LineT", str, bytes)


class LineSource(Generic[LineT]):
    """Pull-based reader over an input stream; yields one line per call."""

    def __init__(self, lines: Iterable[LineT]) -> None:
        self._iter: Iterator[LineT] = iter(lines)
        self.exhausted = False

    def next_line(self) -> Optional[LineT]:
        if self.exhausted:
            return None
        try:
            return next(self._iter)
        except StopIteration:
            self.exhausted = True
            return None

    def drain(self) -> List[LineT]:
        if self.exhausted:
            return []
        remaining = list(self._iter)
        self.exhausted = True
        return remaining


class LineBuffer(Generic[LineT]):
    """Append-only record of every line read so far.

    Lines are fetched lazily: ``ensure`` only pulls the delta needed to cover
    an index, and ``drain`` is the one place the rest of the input is read
    eagerly.
    """

    def __init__(self, source: LineSource[LineT]) -> None:
        self.source = source
        self._lines: List[LineT] = []

    def __len__(self) -> int:
        return len(self._lines)

    def __getitem__(self, index: int) -> LineT:
        return self._lines[index]

    def __iter__(self) -> Iterator[LineT]:
        return iter(self._lines)

    def ensure(self, index: int) -> bool:
        """Return True once the buffer holds a line at ``index``."""
        if index < 0:
            raise IndexError(f"negative line index: {index}")
        while len(self._lines) <= index:
            line = self.source.next_line()
            if line is None:
                return False
            self._lines.append(line)
        return True

    def drain(self) -> int:
        """Read all remaining input; returns the number of lines added."""
        remaining = self.source.drain()
        self._lines.extend(remaining)
        return len(remaining)
