from __future__ import annotations

from pathlib import Path
from typing import List, Union

import os

PathLike = Union[str, Path]


def load_lines(path: PathLike) -> List[str]:
    raw = Path(path).read_bytes()
    text = raw.decode("utf-8", errors="surrogateescape")
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line.rstrip("\r") for line in lines]


def save_text(path: PathLike, text: str) -> int:
    data = text.encode("utf-8", errors="surrogateescape")
    fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o644)
    try:
        # Truncate to the new length instead of O_TRUNC so a failed
        # open leaves the old contents alone.
        os.ftruncate(fd, len(data))
        view = memoryview(data)
        while view:
            written = os.write(fd, view)
            view = view[written:]
    finally:
        os.close(fd)
    return len(data)


class TextFileStore:
    def load(self, path: PathLike) -> List[str]:
        return load_lines(path)

    def save(self, path: PathLike, text: str) -> int:
        return save_text(path, text)
