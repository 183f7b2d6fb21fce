"""Minimal raw-mode terminal text editor."""

from .config import ConfigError, EditorConfig, load_config
from .document import Document, Row, expand_tabs
from .editor import EditorSession, StatusState, process_keypress
from .keys import Key, KeyDecoder, ctrl_key, decode_bytes
from .terminal import Terminal, TerminalError

__all__ = [
    "ConfigError",
    "Document",
    "EditorConfig",
    "EditorSession",
    "Key",
    "KeyDecoder",
    "Row",
    "StatusState",
    "Terminal",
    "TerminalError",
    "ctrl_key",
    "decode_bytes",
    "expand_tabs",
    "load_config",
    "process_keypress",
]
