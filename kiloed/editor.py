from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

import time

from .config import EditorConfig
from .document import Document, Row
from .eventlog import SessionLog
from .fileio import TextFileStore
from .keys import Key, KeyDecoder, KeyEvent, ctrl_key
from .terminal import Terminal
from .ui.frame import compose_frame
from .ui.viewport import Viewport, content_col_to_render_col

HELP_MESSAGE = "HELP: Ctrl-S = save | Ctrl-Q = quit"

QUIT_KEY = ctrl_key("q")
SAVE_KEY = ctrl_key("s")
REFRESH_KEY = ctrl_key("l")
BACKSPACE_ALIAS = ctrl_key("h")
ENTER_KEY = "\r"

_MOVEMENT_KEYS = {
    Key.ARROW_UP,
    Key.ARROW_DOWN,
    Key.ARROW_LEFT,
    Key.ARROW_RIGHT,
    Key.HOME,
    Key.END,
}


@dataclass
class StatusState:
    filename: Optional[str] = None
    message: str = ""
    message_time: float = 0.0
    quit_times: int = 2

    def visible_message(self, now: float, timeout: float) -> str:
        if self.message and now - self.message_time < timeout:
            return self.message
        return ""


@dataclass
class EditorSession:
    document: Document
    screen_rows: int
    screen_cols: int
    config: EditorConfig = field(default_factory=EditorConfig)
    store: TextFileStore = field(default_factory=TextFileStore)
    log: SessionLog = field(default_factory=SessionLog)
    clock: Callable[[], float] = time.time
    cx: int = 0
    cy: int = 0
    viewport: Viewport = field(default_factory=Viewport)
    status: StatusState = field(default_factory=StatusState)

    def __post_init__(self) -> None:
        self.status.quit_times = self.config.quit_times

    @property
    def rx(self) -> int:
        row = self.current_row()
        if row is None:
            return 0
        return content_col_to_render_col(row, self.cx, self.document.tab_stop)

    def current_row(self) -> Optional[Row]:
        if self.cy < len(self.document):
            return self.document[self.cy]
        return None

    def set_status_message(self, message: str) -> None:
        self.status.message = message
        self.status.message_time = self.clock()

    def scroll(self) -> int:
        return self.viewport.scroll(
            self.document, self.cx, self.cy, self.screen_rows, self.screen_cols
        )


def open_file(session: EditorSession, path: str) -> None:
    lines = session.store.load(path)
    session.document.load(lines)
    session.status.filename = path
    session.cx = session.cy = 0
    session.log.event("opened", file=path, rows=len(session.document))


# ===== Editing =====


def insert_char(session: EditorSession, ch: str) -> None:
    document = session.document
    if session.cy == len(document):
        document.append_row("")
    document.row_insert_char(session.cy, session.cx, ch)
    session.cx += 1


def delete_char(session: EditorSession) -> None:
    document = session.document
    if session.cy == len(document):
        return
    if session.cx == 0 and session.cy == 0:
        return
    if session.cx > 0:
        document.row_delete_char(session.cy, session.cx - 1)
        session.cx -= 1
        return
    previous = session.cy - 1
    session.cx = len(document[previous])
    document.row_append(previous, document[session.cy].content)
    document.delete_row(session.cy)
    session.cy = previous


def save(session: EditorSession) -> None:
    filename = session.status.filename
    if not filename:
        session.set_status_message("No file name; nothing saved")
        return
    text = session.document.serialize()
    try:
        written = session.store.save(filename, text)
    except OSError as exc:
        reason = exc.strerror or str(exc)
        session.set_status_message(f"Can't save! I/O error: {reason}")
        session.log.error("save-failed", file=filename, error=reason)
        return
    session.document.mark_clean()
    session.set_status_message(f"{written} bytes written to disk")
    session.log.event("saved", file=filename, bytes=written)


# ===== Cursor movement =====


def move_cursor(session: EditorSession, key: Key) -> None:
    document = session.document
    row = session.current_row()
    if key is Key.ARROW_LEFT:
        if session.cx > 0:
            session.cx -= 1
        elif session.cy > 0:
            session.cy -= 1
            session.cx = len(document[session.cy])
    elif key is Key.ARROW_RIGHT:
        if row is not None and session.cx < len(row):
            session.cx += 1
        elif row is not None and session.cx == len(row):
            session.cy += 1
            session.cx = 0
    elif key is Key.ARROW_UP:
        if session.cy > 0:
            session.cy -= 1
    elif key is Key.ARROW_DOWN:
        if session.cy < len(document):
            session.cy += 1
    elif key is Key.HOME:
        session.cx = 0
    elif key is Key.END:
        session.cx = len(row) if row is not None else 0
    _clamp_cx(session)


def _clamp_cx(session: EditorSession) -> None:
    row = session.current_row()
    row_len = len(row) if row is not None else 0
    if session.cx > row_len:
        session.cx = row_len


def _page(session: EditorSession, key: Key) -> None:
    if key is Key.PAGE_UP:
        session.cy = session.viewport.row_offset
        step = Key.ARROW_UP
    else:
        session.cy = min(
            session.viewport.row_offset + session.screen_rows - 1,
            len(session.document),
        )
        step = Key.ARROW_DOWN
    _clamp_cx(session)
    for _ in range(session.screen_rows):
        move_cursor(session, step)


# ===== Dispatch =====


def _is_insertable(ch: str) -> bool:
    if ch == "\t" or ch.isprintable():
        return True
    # Undecodable input bytes, kept as surrogate escapes.
    return "\udc80" <= ch <= "\udcff"


def _handle_quit(session: EditorSession) -> bool:
    status = session.status
    if session.document.dirty and status.quit_times > 0:
        session.set_status_message(
            "WARNING!!! File has unsaved changes. "
            f"Press Ctrl-Q {status.quit_times} more times to quit."
        )
        session.log.warning("quit-blocked", remaining=status.quit_times)
        status.quit_times -= 1
        return True
    session.log.event("quit", dirty=session.document.dirty)
    return False


def process_keypress(session: EditorSession, key: KeyEvent) -> bool:
    """Apply one key to the session. Returns False when the editor should exit."""
    if key == QUIT_KEY:
        return _handle_quit(session)

    if key == SAVE_KEY:
        save(session)
    elif key in (Key.PAGE_UP, Key.PAGE_DOWN):
        _page(session, key)
    elif key in (Key.BACKSPACE, BACKSPACE_ALIAS, Key.DELETE):
        if key is Key.DELETE:
            move_cursor(session, Key.ARROW_RIGHT)
        delete_char(session)
    elif key in _MOVEMENT_KEYS:
        move_cursor(session, key)
    elif key in (Key.ESCAPE, REFRESH_KEY):
        pass
    elif key == ENTER_KEY:
        session.log.debug("enter-ignored", cx=session.cx, cy=session.cy)
    elif isinstance(key, str) and _is_insertable(key):
        insert_char(session, key)

    session.status.quit_times = session.config.quit_times
    return True


# ===== Main loop =====


def refresh_screen(session: EditorSession, terminal: Terminal) -> None:
    session.scroll()
    terminal.write(compose_frame(session, session.clock()))


def run(session: EditorSession, terminal: Terminal) -> None:
    decoder = KeyDecoder(terminal.read_byte)
    while True:
        refresh_screen(session, terminal)
        key = decoder.read_key()
        if key is None:
            continue
        if not process_keypress(session, key):
            terminal.clear_screen()
            return
