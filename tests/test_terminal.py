import os
import select
import struct
import sys
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

try:
    import fcntl
    import termios
except ImportError:  # pragma: no cover - non-POSIX platforms
    termios = None

from kiloed.terminal import Terminal, TerminalError


def _read_all(fd):
    chunks = []
    while True:
        ready, _, _ = select.select([fd], [], [], 0.05)
        if not ready:
            return b"".join(chunks)
        chunks.append(os.read(fd, 1024))


@unittest.skipIf(termios is None or not hasattr(os, "openpty"), "needs a pty")
class TestTerminal(unittest.TestCase):
    def setUp(self):
        self.master, self.slave = os.openpty()
        self.terminal = Terminal(fd_in=self.slave, fd_out=self.slave, read_timeout=0.05)

    def tearDown(self):
        self.terminal.leave_raw_mode()
        os.close(self.master)
        os.close(self.slave)

    def test_raw_mode_disables_line_discipline(self):
        original = termios.tcgetattr(self.slave)
        self.terminal.enter_raw_mode()
        self.assertTrue(self.terminal.raw)
        iflag, oflag, _, lflag, _, _, cc = termios.tcgetattr(self.slave)
        for flag in (termios.ECHO, termios.ICANON, termios.ISIG, termios.IEXTEN):
            self.assertFalse(lflag & flag)
        for flag in (termios.IXON, termios.ICRNL):
            self.assertFalse(iflag & flag)
        self.assertFalse(oflag & termios.OPOST)
        self.assertEqual(cc[termios.VMIN], 0)
        self.assertEqual(cc[termios.VTIME], 1)

        self.terminal.leave_raw_mode()
        self.assertFalse(self.terminal.raw)
        self.assertEqual(termios.tcgetattr(self.slave)[3], original[3])
        self.terminal.leave_raw_mode()

    def test_context_manager_restores(self):
        original = termios.tcgetattr(self.slave)
        with self.terminal:
            self.assertTrue(self.terminal.raw)
        self.assertEqual(termios.tcgetattr(self.slave)[3], original[3])

    def test_read_byte_with_timeout(self):
        self.terminal.enter_raw_mode()
        self.assertIsNone(self.terminal.read_byte())
        os.write(self.master, b"q")
        self.assertEqual(self.terminal.read_byte(timeout=1.0), ord("q"))
        self.assertIsNone(self.terminal.read_byte(timeout=0.01))

    def test_write_sends_whole_buffer(self):
        self.terminal.enter_raw_mode()
        self.terminal.write("frame\r\n")
        self.assertEqual(_read_all(self.master), b"frame\r\n")

    def test_screen_size_from_window_size(self):
        fcntl.ioctl(self.slave, termios.TIOCSWINSZ, struct.pack("HHHH", 30, 100, 0, 0))
        self.assertEqual(self.terminal.query_screen_size(), (30, 100))

    def test_screen_size_falls_back_to_cursor_report(self):
        fcntl.ioctl(self.slave, termios.TIOCSWINSZ, struct.pack("HHHH", 0, 0, 0, 0))
        self.terminal.enter_raw_mode()
        os.write(self.master, b"\x1b[24;80R")
        self.assertEqual(self.terminal.query_screen_size(), (24, 80))
        self.assertEqual(_read_all(self.master), b"\x1b[999C\x1b[999B\x1b[6n")

    def test_bad_cursor_report_is_an_error(self):
        self.terminal.enter_raw_mode()
        os.write(self.master, b"\x1b[oopsR")
        with self.assertRaises(TerminalError):
            self.terminal.query_cursor_position()

    def test_raw_mode_on_non_terminal_fails(self):
        read_fd, write_fd = os.pipe()
        try:
            with self.assertRaises(TerminalError):
                Terminal(fd_in=read_fd, fd_out=write_fd).enter_raw_mode()
        finally:
            os.close(read_fd)
            os.close(write_fd)


if __name__ == "__main__":
    unittest.main()
