from __future__ import annotations

from dataclasses import dataclass

from ..document import TAB_STOP, Document, Row


def content_col_to_render_col(row: Row, cx: int, tab_stop: int = TAB_STOP) -> int:
    # Same tab arithmetic as document.expand_tabs.
    rx = 0
    for ch in row.content[:cx]:
        if ch == "\t":
            rx += (tab_stop - 1) - (rx % tab_stop)
        rx += 1
    return rx


@dataclass
class Viewport:
    row_offset: int = 0
    col_offset: int = 0

    def scroll(
        self,
        document: Document,
        cx: int,
        cy: int,
        screen_rows: int,
        screen_cols: int,
    ) -> int:
        """Snap the offsets so the cursor is visible; return the render column."""
        rx = 0
        if cy < len(document):
            rx = content_col_to_render_col(document[cy], cx, document.tab_stop)

        if cy < self.row_offset:
            self.row_offset = cy
        if cy >= self.row_offset + screen_rows:
            self.row_offset = cy - screen_rows + 1
        if rx < self.col_offset:
            self.col_offset = rx
        if rx >= self.col_offset + screen_cols:
            self.col_offset = rx - screen_cols + 1
        return rx
