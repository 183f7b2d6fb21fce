"""Row buffer document model.

Each Row keeps its logical content and a tab-expanded render string.
The render string is rebuilt every time the content changes, so callers
never see a stale one. Document mutations bump the ``dirty`` counter.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List

TAB_STOP = 8


def expand_tabs(content: str, tab_stop: int = TAB_STOP) -> str:
    parts: List[str] = []
    column = 0
    for ch in content:
        if ch == "\t":
            parts.append(" ")
            column += 1
            while column % tab_stop != 0:
                parts.append(" ")
                column += 1
        else:
            parts.append(ch)
            column += 1
    return "".join(parts)


class Row:
    __slots__ = ("_content", "_render", "tab_stop")

    def __init__(self, content: str = "", tab_stop: int = TAB_STOP):
        self.tab_stop = tab_stop
        self._content = ""
        self._render = ""
        self.content = content

    @property
    def content(self) -> str:
        return self._content

    @content.setter
    def content(self, value: str) -> None:
        self._content = value
        self._render = expand_tabs(value, self.tab_stop)

    @property
    def render(self) -> str:
        return self._render

    def __len__(self) -> int:
        return len(self._content)

    def __repr__(self) -> str:
        return f"Row({self._content!r})"


class Document:
    def __init__(self, lines: Iterable[str] = (), tab_stop: int = TAB_STOP):
        self.tab_stop = tab_stop
        self.rows: List[Row] = [Row(line, tab_stop) for line in lines]
        self.dirty = 0

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def __getitem__(self, index: int) -> Row:
        return self.rows[index]

    @property
    def lines(self) -> List[str]:
        return [row.content for row in self.rows]

    def load(self, lines: Iterable[str]) -> None:
        self.rows = [Row(line, self.tab_stop) for line in lines]
        self.dirty = 0

    def mark_clean(self) -> None:
        self.dirty = 0

    def insert_row(self, at: int, text: str = "") -> None:
        if at < 0 or at > len(self.rows):
            return
        self.rows.insert(at, Row(text, self.tab_stop))
        self.dirty += 1

    def append_row(self, text: str = "") -> None:
        self.insert_row(len(self.rows), text)

    def delete_row(self, at: int) -> None:
        if at < 0 or at >= len(self.rows):
            return
        del self.rows[at]
        self.dirty += 1

    def row_insert_char(self, index: int, at: int, ch: str) -> None:
        row = self.rows[index]
        content = row.content
        if at < 0 or at > len(content):
            at = len(content)
        row.content = content[:at] + ch + content[at:]
        self.dirty += 1

    def row_delete_char(self, index: int, at: int) -> None:
        row = self.rows[index]
        content = row.content
        if at < 0 or at >= len(content):
            return
        row.content = content[:at] + content[at + 1 :]
        self.dirty += 1

    def row_append(self, index: int, text: str) -> None:
        row = self.rows[index]
        row.content = row.content + text
        self.dirty += 1

    def serialize(self) -> str:
        return "".join(row.content + "\n" for row in self.rows)
