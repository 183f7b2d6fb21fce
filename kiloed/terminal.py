from __future__ import annotations

from typing import List, Optional, Tuple

import atexit
import os
import re
import select
import sys
import termios
import tty

from rich.control import Control

CURSOR_REPORT_QUERY = "\x1b[6n"
_CURSOR_REPORT = re.compile(r"^\x1b\[(\d+);(\d+)$")


class TerminalError(RuntimeError):
    pass


class Terminal:
    """Raw-mode terminal owned by one editor session."""

    def __init__(
        self,
        fd_in: Optional[int] = None,
        fd_out: Optional[int] = None,
        read_timeout: float = 0.1,
    ):
        self.fd_in = sys.stdin.fileno() if fd_in is None else fd_in
        self.fd_out = sys.stdout.fileno() if fd_out is None else fd_out
        self.read_timeout = read_timeout
        self._saved_attrs: Optional[List] = None
        self._exit_hook_registered = False

    @property
    def raw(self) -> bool:
        return self._saved_attrs is not None

    def __enter__(self) -> "Terminal":
        self.enter_raw_mode()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.leave_raw_mode()

    def enter_raw_mode(self) -> None:
        if self._saved_attrs is not None:
            return
        try:
            saved = termios.tcgetattr(self.fd_in)
            tty.setraw(self.fd_in, termios.TCSAFLUSH)
            attrs = termios.tcgetattr(self.fd_in)
            # Reads return after one byte or a 100ms tick, whichever first.
            attrs[tty.CC][termios.VMIN] = 0
            attrs[tty.CC][termios.VTIME] = 1
            termios.tcsetattr(self.fd_in, termios.TCSAFLUSH, attrs)
        except termios.error as exc:
            raise TerminalError(f"cannot enter raw mode: {exc}") from exc
        self._saved_attrs = saved
        if not self._exit_hook_registered:
            atexit.register(self.leave_raw_mode)
            self._exit_hook_registered = True

    def leave_raw_mode(self) -> None:
        if self._saved_attrs is None:
            return
        saved, self._saved_attrs = self._saved_attrs, None
        try:
            termios.tcsetattr(self.fd_in, termios.TCSAFLUSH, saved)
        except termios.error as exc:
            raise TerminalError(f"cannot restore terminal: {exc}") from exc

    def read_byte(self, timeout: Optional[float] = None) -> Optional[int]:
        """Wait up to ``timeout`` seconds for one input byte."""
        if timeout is None:
            timeout = self.read_timeout
        try:
            ready, _, _ = select.select([self.fd_in], [], [], timeout)
            if not ready:
                return None
            data = os.read(self.fd_in, 1)
        except (BlockingIOError, InterruptedError):
            return None
        except OSError as exc:
            raise TerminalError(f"read failed: {exc}") from exc
        if not data:
            return None
        return data[0]

    def write(self, text: str) -> None:
        data = text.encode("utf-8", "surrogateescape")
        try:
            while data:
                written = os.write(self.fd_out, data)
                data = data[written:]
        except OSError as exc:
            raise TerminalError(f"write failed: {exc}") from exc

    def clear_screen(self) -> None:
        self.write(str(Control.clear()) + str(Control.home()))

    def query_screen_size(self) -> Tuple[int, int]:
        try:
            size = os.get_terminal_size(self.fd_out)
        except OSError:
            size = None
        if size is not None and size.columns > 0:
            return size.lines, size.columns
        self.write(str(Control.move(999, 999)))
        return self.query_cursor_position()

    def query_cursor_position(self) -> Tuple[int, int]:
        self.write(CURSOR_REPORT_QUERY)
        reply = ""
        while len(reply) < 31:
            byte = self.read_byte()
            if byte is None:
                break
            ch = chr(byte)
            if ch == "R":
                break
            reply += ch
        match = _CURSOR_REPORT.match(reply)
        if not match:
            raise TerminalError(f"unexpected cursor position reply: {reply!r}")
        return int(match.group(1)), int(match.group(2))
