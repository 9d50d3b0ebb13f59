"""
Cross-platform control terminal access.

The filtered streams are stdin/stdout, so prompts and keypresses go through
the controlling terminal device instead. On Unix systems this uses
termios/tty on /dev/tty. On Windows it uses msvcrt and the console API.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, Optional, TextIO

if sys.platform == "win32":
    import ctypes
    import msvcrt
    from ctypes import wintypes

    kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)

    ENABLE_PROCESSED_INPUT = 0x0001
    ENABLE_LINE_INPUT = 0x0002
    ENABLE_ECHO_INPUT = 0x0004
    ENABLE_EXTENDED_FLAGS = 0x0080
    ENABLE_QUICK_EDIT_MODE = 0x0040

    kernel32.GetConsoleMode.argtypes = [wintypes.HANDLE, wintypes.LPDWORD]
    kernel32.GetConsoleMode.restype = wintypes.BOOL
    kernel32.SetConsoleMode.argtypes = [wintypes.HANDLE, wintypes.DWORD]
    kernel32.SetConsoleMode.restype = wintypes.BOOL

    READ_DEVICE = "CONIN$"
    WRITE_DEVICE = "CONOUT$"
    TerminalError = OSError

    @dataclass(frozen=True)
    class _TerminalSettings:
        handle: int
        mode: int

    def tcgetattr(fd: int) -> _TerminalSettings:
        """Get console settings (Windows)."""
        handle = msvcrt.get_osfhandle(fd)
        mode = wintypes.DWORD()
        if not kernel32.GetConsoleMode(handle, ctypes.byref(mode)):
            raise OSError("Failed to read Windows console mode")
        return _TerminalSettings(handle=handle, mode=mode.value)

    def tcsetattr(fd: int, when: int, settings: _TerminalSettings) -> None:
        """Set console settings (Windows)."""
        if not kernel32.SetConsoleMode(settings.handle, settings.mode):
            raise OSError("Failed to restore Windows console mode")

    def setcbreak(fd: int) -> None:
        """Disable line input and echo (Windows)."""
        settings = tcgetattr(fd)
        mode = settings.mode
        mode &= ~(ENABLE_LINE_INPUT | ENABLE_ECHO_INPUT | ENABLE_QUICK_EDIT_MODE)
        mode |= ENABLE_EXTENDED_FLAGS
        if not kernel32.SetConsoleMode(settings.handle, mode):
            raise OSError("Failed to set Windows console mode")

    TCSADRAIN = 0  # Dummy value for Windows compatibility

    def getch(stream: TextIO) -> str:
        """Read a single key from the console (Windows)."""
        if hasattr(msvcrt, "getwch"):
            return msvcrt.getwch()
        return msvcrt.getch().decode("utf-8", errors="ignore")

else:
    import termios
    import tty

    READ_DEVICE = "/dev/tty"
    WRITE_DEVICE = "/dev/tty"
    TerminalError = termios.error

    _TerminalSettings = Any  # type: ignore[misc]
    tcgetattr = termios.tcgetattr  # type: ignore[assignment]
    tcsetattr = termios.tcsetattr  # type: ignore[assignment]
    TCSADRAIN = termios.TCSADRAIN
    setcbreak = tty.setcbreak  # type: ignore[assignment]

    def getch(stream: TextIO) -> str:
        """Read a single character from the terminal (Unix)."""
        return stream.read(1)


class TerminalUnavailable(OSError):
    """Raised when the controlling terminal cannot be opened or configured."""


class ControlTerminal:
    """The interactive device used for prompts, kept apart from stdin/stdout.

    Entering the context switches the reader to single-key, no-echo mode;
    leaving restores the saved settings and closes the device on every path.
    """

    def __init__(self, reader: TextIO, writer: TextIO) -> None:
        self.reader = reader
        self.writer = writer
        self._saved: Optional[_TerminalSettings] = None

    @classmethod
    def open(
        cls,
        read_device: str | None = None,
        write_device: str | None = None,
    ) -> "ControlTerminal":
        read_path = read_device or READ_DEVICE
        write_path = write_device or WRITE_DEVICE
        try:
            # newline="" so a raw CR is returned as soon as it is typed.
            reader = open(
                read_path, "r", encoding="utf-8", errors="replace", newline=""
            )
        except OSError as exc:
            raise TerminalUnavailable(f"cannot open {read_path}: {exc}") from exc
        try:
            writer = open(write_path, "w", encoding="utf-8", buffering=1)
        except OSError as exc:
            reader.close()
            raise TerminalUnavailable(f"cannot open {write_path}: {exc}") from exc
        return cls(reader, writer)

    def __enter__(self) -> "ControlTerminal":
        fd = self.reader.fileno()
        try:
            self._saved = tcgetattr(fd)
            setcbreak(fd)
        except (OSError, TerminalError) as exc:
            self.close()
            raise TerminalUnavailable(f"cannot configure control terminal: {exc}") from exc
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[no-untyped-def]
        try:
            self.restore()
        finally:
            self.close()

    def restore(self) -> None:
        if self._saved is None:
            return
        saved, self._saved = self._saved, None
        tcsetattr(self.reader.fileno(), TCSADRAIN, saved)

    def read_key(self) -> str:
        return getch(self.reader)

    def close(self) -> None:
        for stream in (self.writer, self.reader):
            if not stream.closed:
                stream.close()


__all__ = [
    "ControlTerminal",
    "TerminalUnavailable",
    "TerminalError",
    "tcgetattr",
    "tcsetattr",
    "TCSADRAIN",
    "setcbreak",
    "getch",
    "_TerminalSettings",
    "READ_DEVICE",
    "WRITE_DEVICE",
]
