"""Per-cycle frame composition.

``compose_frame`` turns the session state into one string of text and
VT100 control sequences; the caller writes it to the terminal in a single
call. Nothing here mutates the session.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, List, Optional

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound
from rich.control import Control
from rich.segment import ControlType
from rich.style import Style

if TYPE_CHECKING:
    from ..editor import EditorSession

VERSION = "0.0.1"
WELCOME = f"Kiloed editor -- version {VERSION}"
NO_NAME = "[No Name]"
NO_FILETYPE = "no ft"

ERASE_LINE = str(Control((ControlType.ERASE_IN_LINE, 0)))
LINE_BREAK = "\r\n"
_REVERSE = Style(reverse=True)


@lru_cache(maxsize=64)
def describe_filetype(filename: Optional[str]) -> str:
    if not filename:
        return NO_FILETYPE
    try:
        lexer = get_lexer_for_filename(filename)
    except ClassNotFound:
        return NO_FILETYPE
    return lexer.name or NO_FILETYPE


def compose_frame(session: "EditorSession", now: float) -> str:
    parts: List[str] = [str(Control.show_cursor(False)), str(Control.home())]
    _draw_rows(parts, session)
    _draw_status_bar(parts, session)
    _draw_message_bar(parts, session, now)
    viewport = session.viewport
    parts.append(
        str(
            Control.move_to(
                session.rx - viewport.col_offset, session.cy - viewport.row_offset
            )
        )
    )
    parts.append(str(Control.show_cursor(True)))
    return "".join(parts)


def _draw_rows(parts: List[str], session: "EditorSession") -> None:
    document = session.document
    width = session.screen_cols
    row_offset = session.viewport.row_offset
    col_offset = session.viewport.col_offset
    for y in range(session.screen_rows):
        file_row = y + row_offset
        if file_row >= len(document):
            if len(document) == 0 and y == session.screen_rows // 3:
                parts.append(_welcome_line(width))
            else:
                parts.append("~")
        else:
            parts.append(document[file_row].render[col_offset : col_offset + width])
        parts.append(ERASE_LINE)
        parts.append(LINE_BREAK)


def _welcome_line(width: int) -> str:
    welcome = WELCOME[:width]
    padding = (width - len(welcome)) // 2
    line = ""
    if padding:
        line = "~"
        padding -= 1
    return line + " " * padding + welcome


def _draw_status_bar(parts: List[str], session: "EditorSession") -> None:
    document = session.document
    width = session.screen_cols
    name = (session.status.filename or NO_NAME)[:20]
    marker = "*" if document.dirty else ""
    left = f"{name}{marker} - {len(document)} lines"[:width]
    right = (
        f"{describe_filetype(session.status.filename)} | "
        f"{session.cy + 1}/{len(document)}"
    )
    line = left
    while len(line) < width:
        if width - len(line) == len(right):
            line += right
            break
        line += " "
    parts.append(_REVERSE.render(line))
    parts.append(LINE_BREAK)


def _draw_message_bar(parts: List[str], session: "EditorSession", now: float) -> None:
    parts.append(ERASE_LINE)
    message = session.status.visible_message(now, session.config.message_timeout)
    parts.append(message[: session.screen_cols])
