import ctypes
import importlib
import io
import sys
import types
import unittest
from unittest import mock

import linepick.cli.terminal as terminal


def _fake_reader(keys: str = "y") -> mock.Mock:
    reader = mock.Mock()
    reader.fileno.return_value = 7
    reader.closed = False
    reader.read.side_effect = list(keys)
    return reader


class ControlTerminalTests(unittest.TestCase):
    def test_open_missing_device_is_unavailable(self) -> None:
        with self.assertRaises(terminal.TerminalUnavailable):
            terminal.ControlTerminal.open(read_device="/nonexistent/linepick-tty")

    def test_context_sets_cbreak_and_restores(self) -> None:
        reader = _fake_reader("yn")
        writer = mock.Mock(closed=False)
        with mock.patch.object(terminal, "tcgetattr", return_value="saved") as get_attr, \
                mock.patch.object(terminal, "setcbreak") as set_cbreak, \
                mock.patch.object(terminal, "tcsetattr") as set_attr:
            with terminal.ControlTerminal(reader, writer) as term:
                get_attr.assert_called_once_with(7)
                set_cbreak.assert_called_once_with(7)
                self.assertEqual(term.read_key(), "y")
                self.assertEqual(term.read_key(), "n")
                set_attr.assert_not_called()
            set_attr.assert_called_once_with(7, terminal.TCSADRAIN, "saved")
        reader.read.assert_called_with(1)
        reader.close.assert_called_once_with()
        writer.close.assert_called_once_with()

    def test_settings_restored_when_interrupted(self) -> None:
        reader = _fake_reader()
        reader.read.side_effect = KeyboardInterrupt
        writer = mock.Mock(closed=False)
        with mock.patch.object(terminal, "tcgetattr", return_value="saved"), \
                mock.patch.object(terminal, "setcbreak"), \
                mock.patch.object(terminal, "tcsetattr") as set_attr:
            with self.assertRaises(KeyboardInterrupt):
                with terminal.ControlTerminal(reader, writer) as term:
                    term.read_key()
            set_attr.assert_called_once_with(7, terminal.TCSADRAIN, "saved")
        reader.close.assert_called_once_with()

    def test_unconfigurable_terminal_is_unavailable(self) -> None:
        reader = _fake_reader()
        writer = mock.Mock(closed=False)
        with mock.patch.object(terminal, "tcgetattr", side_effect=OSError("not a tty")):
            with self.assertRaises(terminal.TerminalUnavailable):
                with terminal.ControlTerminal(reader, writer):
                    self.fail("context body should not run")
        reader.close.assert_called_once_with()
        writer.close.assert_called_once_with()

    @unittest.skipIf(sys.platform == "win32", "needs a pseudo terminal")
    def test_raw_carriage_return_read_at_once(self) -> None:
        import os
        import pty
        import termios
        import threading

        master, slave = pty.openpty()
        try:
            name = os.ttyname(slave)
            with terminal.ControlTerminal.open(read_device=name, write_device=name) as term:
                fd = term.reader.fileno()
                attrs = termios.tcgetattr(fd)
                attrs[0] &= ~termios.ICRNL
                termios.tcsetattr(fd, termios.TCSANOW, attrs)

                keys: list = []
                reader_thread = threading.Thread(
                    target=lambda: keys.append(term.read_key()), daemon=True
                )
                os.write(master, b"\r")
                reader_thread.start()
                reader_thread.join(timeout=2)
                self.assertFalse(reader_thread.is_alive(), "read_key blocked on CR")
                self.assertEqual(keys, ["\r"])

                os.write(master, b"y")
                self.assertEqual(term.read_key(), "y")
        finally:
            os.close(master)
            os.close(slave)

    def test_getch_reads_one_character(self) -> None:
        if sys.platform == "win32":
            self.skipTest("Unix getch reads from the stream")
        self.assertEqual(terminal.getch(io.StringIO("abc")), "a")


class TerminalWindowsTests(unittest.TestCase):
    def test_windows_console_modes(self) -> None:
        original_platform = sys.platform
        last_mode = {"value": None}

        def fake_get_console_mode(_handle, mode_ptr):  # type: ignore[no-untyped-def]
            ctypes.cast(mode_ptr, ctypes.POINTER(ctypes.c_ulong)).contents.value = 0xFFFF
            return 1

        def fake_set_console_mode(_handle, mode):  # type: ignore[no-untyped-def]
            last_mode["value"] = mode
            return 1

        kernel32 = types.SimpleNamespace(
            GetConsoleMode=fake_get_console_mode,
            SetConsoleMode=fake_set_console_mode,
        )
        stub_msvcrt = types.SimpleNamespace(
            get_osfhandle=mock.Mock(return_value=123),
            getwch=mock.Mock(return_value="A"),
            getch=mock.Mock(return_value=b"A"),
        )

        try:
            with mock.patch.object(sys, "platform", "win32"):
                with mock.patch.dict(sys.modules, {"msvcrt": stub_msvcrt}):
                    with mock.patch.object(
                        ctypes, "WinDLL", return_value=kernel32, create=True
                    ):
                        win_term = importlib.reload(terminal)
                        self.assertEqual(win_term.READ_DEVICE, "CONIN$")
                        settings = win_term.tcgetattr(0)
                        self.assertEqual(settings.handle, 123)
                        self.assertEqual(settings.mode, 0xFFFF)
                        win_term.setcbreak(0)
                        self.assertIsNotNone(last_mode["value"])
                        self.assertEqual(
                            last_mode["value"] & win_term.ENABLE_LINE_INPUT, 0
                        )
                        self.assertEqual(
                            last_mode["value"] & win_term.ENABLE_ECHO_INPUT, 0
                        )
                        win_term.tcsetattr(0, win_term.TCSADRAIN, settings)
                        self.assertEqual(last_mode["value"], settings.mode)
                        self.assertEqual(win_term.getch(io.StringIO()), "A")
        finally:
            with mock.patch.object(sys, "platform", original_platform):
                importlib.reload(terminal)


if __name__ == "__main__":
    unittest.main()
