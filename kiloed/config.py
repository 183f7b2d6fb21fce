from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, Tuple

import math
import os

DEFAULT_CONFIG_PATH = Path.home() / ".kiloedrc"

_INT_KEYS = {
    "KILOED_TAB_STOP": "tab_stop",
    "KILOED_QUIT_TIMES": "quit_times",
}
_FLOAT_KEYS = {
    "KILOED_MESSAGE_TIMEOUT": "message_timeout",
    "KILOED_READ_TIMEOUT": "read_timeout",
}


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class EditorConfig:
    tab_stop: int = 8
    quit_times: int = 2
    message_timeout: float = 5.0
    read_timeout: float = 0.1
    log_path: Optional[str] = None

    def with_overrides(self, **overrides) -> "EditorConfig":
        values = {key: value for key, value in overrides.items() if value is not None}
        config = replace(self, **values)
        config.validate()
        return config

    def validate(self) -> None:
        if self.tab_stop < 1:
            raise ConfigError(f"tab stop must be at least 1, got {self.tab_stop}")
        if self.quit_times < 0:
            raise ConfigError(f"quit times must not be negative, got {self.quit_times}")
        if not math.isfinite(self.message_timeout) or self.message_timeout <= 0:
            raise ConfigError(
                f"message timeout must be a positive number, got {self.message_timeout}"
            )
        if not math.isfinite(self.read_timeout) or self.read_timeout <= 0:
            raise ConfigError(
                f"read timeout must be a positive number, got {self.read_timeout}"
            )


def load_config(
    path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> EditorConfig:
    """Build the editor config from the rc file, then the environment.

    Environment variables win over rc-file entries; anything not set keeps
    the EditorConfig default.
    """
    if environ is None:
        environ = os.environ
    rc_path = path or DEFAULT_CONFIG_PATH
    settings = dict(_rc_entries(rc_path))
    settings.update(
        (key, value) for key, value in environ.items() if key.startswith("KILOED_")
    )

    values: Dict[str, object] = {}
    for key, raw in settings.items():
        if key in _INT_KEYS:
            values[_INT_KEYS[key]] = _parse_number(key, raw, int)
        elif key in _FLOAT_KEYS:
            values[_FLOAT_KEYS[key]] = _parse_number(key, raw, float)
        elif key == "KILOED_LOG_PATH" and raw:
            values["log_path"] = raw

    config = EditorConfig(**values)
    config.validate()
    return config


def _parse_number(key: str, raw: str, kind):
    try:
        return kind(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None


def _rc_entries(path: Path) -> Iterator[Tuple[str, str]]:
    """Yield ``KILOED_*`` assignments from an rc file; a missing file is empty."""
    try:
        with path.open(encoding="utf-8", errors="replace") as handle:
            lines = handle.readlines()
    except FileNotFoundError:
        return
    except OSError as exc:
        raise ConfigError(f"cannot read {path}: {exc.strerror or exc}") from exc
    for line in lines:
        line = line.strip()
        if line.startswith("export "):
            line = line[len("export ") :]
        name, sep, value = line.partition("=")
        name = name.strip()
        if not sep or not name.startswith("KILOED_"):
            # Comments, blank lines and other tools' settings.
            continue
        yield name, _unquote(value.strip())


def _unquote(value: str) -> str:
    for quote in ('"', "'"):
        if len(value) >= 2 and value.startswith(quote) and value.endswith(quote):
            return value[1:-1]
    return value
