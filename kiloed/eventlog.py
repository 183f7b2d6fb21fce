"""JSON-lines event log for editor sessions.

The terminal is in raw mode while the editor runs, so diagnostics go to a
file instead of the screen.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import json


class SessionLog:
    def __init__(self, path: Optional[Union[str, Path]] = None, verbose: bool = False):
        self.path = Path(path) if path else None
        self.verbose = verbose

    @property
    def enabled(self) -> bool:
        return self.path is not None

    def event(self, event: str, level: str = "info", **fields) -> None:
        if self.path is None:
            return
        record = {
            "time": datetime.now().isoformat(timespec="milliseconds"),
            "level": level,
            "event": event,
        }
        record.update(fields)
        try:
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(record, default=str) + "\n")
        except OSError:
            # Unwritable log: stop logging, keep editing.
            self.path = None

    def debug(self, event: str, **fields) -> None:
        if self.verbose:
            self.event(event, level="debug", **fields)

    def warning(self, event: str, **fields) -> None:
        self.event(event, level="warning", **fields)

    def error(self, event: str, **fields) -> None:
        self.event(event, level="error", **fields)
