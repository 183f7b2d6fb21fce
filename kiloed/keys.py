"""Keystroke decoding.

Raw bytes arrive one at a time through a bounded-wait reader that returns
``None`` on timeout. Escape sequences are decoded by a small state machine;
any malformed or incomplete sequence degrades to ``Key.ESCAPE``.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

import codecs

ESC = 0x1B
BACKSPACE_BYTE = 127


class Key(Enum):
    ESCAPE = "escape"
    BACKSPACE = "backspace"
    ARROW_UP = "up"
    ARROW_DOWN = "down"
    ARROW_LEFT = "left"
    ARROW_RIGHT = "right"
    PAGE_UP = "page-up"
    PAGE_DOWN = "page-down"
    HOME = "home"
    END = "end"
    DELETE = "delete"


KeyEvent = Union[Key, str]
ByteReader = Callable[[], Optional[int]]


def ctrl_key(letter: str) -> str:
    return chr(ord(letter) & 0x1F)


class DecoderState(Enum):
    IDLE = "idle"
    SAW_ESCAPE = "saw-escape"
    SAW_BRACKET = "saw-bracket"
    SAW_DIGIT = "saw-digit"


_LETTER_KEYS: Dict[str, Key] = {
    "A": Key.ARROW_UP,
    "B": Key.ARROW_DOWN,
    "C": Key.ARROW_RIGHT,
    "D": Key.ARROW_LEFT,
    "H": Key.HOME,
    "F": Key.END,
}

_DIGIT_KEYS: Dict[str, Key] = {
    "1": Key.HOME,
    "3": Key.DELETE,
    "4": Key.END,
    "5": Key.PAGE_UP,
    "6": Key.PAGE_DOWN,
    "7": Key.HOME,
    "8": Key.END,
}

# (next state, emitted key, remembered digit)
Transition = Tuple[DecoderState, Optional[Key], Optional[str]]


def _after_escape(ch: str, digit: Optional[str]) -> Transition:
    if ch == "[":
        return DecoderState.SAW_BRACKET, None, None
    return DecoderState.IDLE, Key.ESCAPE, None


def _after_bracket(ch: str, digit: Optional[str]) -> Transition:
    if "0" <= ch <= "9":
        return DecoderState.SAW_DIGIT, None, ch
    return DecoderState.IDLE, _LETTER_KEYS.get(ch, Key.ESCAPE), None


def _after_digit(ch: str, digit: Optional[str]) -> Transition:
    if ch == "~" and digit is not None:
        return DecoderState.IDLE, _DIGIT_KEYS.get(digit, Key.ESCAPE), None
    return DecoderState.IDLE, Key.ESCAPE, None


TRANSITIONS: Dict[DecoderState, Callable[[str, Optional[str]], Transition]] = {
    DecoderState.SAW_ESCAPE: _after_escape,
    DecoderState.SAW_BRACKET: _after_bracket,
    DecoderState.SAW_DIGIT: _after_digit,
}


def decode_escape(read_byte: ByteReader) -> Key:
    """Decode the rest of a sequence whose ESC byte was already read."""
    state = DecoderState.SAW_ESCAPE
    digit: Optional[str] = None
    while True:
        byte = read_byte()
        if byte is None:
            return Key.ESCAPE
        state, key, digit = TRANSITIONS[state](chr(byte), digit)
        if key is not None:
            return key


class KeyDecoder:
    def __init__(self, read_byte: ByteReader):
        self.read_byte = read_byte
        self._pending: List[str] = []
        self._replay: List[int] = []

    def _next_byte(self) -> Optional[int]:
        if self._replay:
            return self._replay.pop(0)
        return self.read_byte()

    def read_key(self) -> Optional[KeyEvent]:
        """Return the next key, or None if no byte arrived before the timeout."""
        if self._pending:
            return self._pending.pop(0)
        byte = self._next_byte()
        if byte is None:
            return None
        if byte == ESC:
            return decode_escape(self._next_byte)
        if byte == BACKSPACE_BYTE:
            return Key.BACKSPACE
        if byte < 0x80:
            return chr(byte)
        return self._decode_utf8(byte)

    def _decode_utf8(self, first: int) -> Optional[KeyEvent]:
        decoder = codecs.getincrementaldecoder("utf-8")("surrogateescape")
        text = decoder.decode(bytes([first]))
        while not text:
            byte = self._next_byte()
            if byte is None or byte < 0x80:
                # ASCII never continues a sequence; decode it as its own key.
                if byte is not None:
                    self._replay.insert(0, byte)
                text = decoder.decode(b"", final=True)
                break
            text = decoder.decode(bytes([byte]))
        buffered, _ = decoder.getstate()
        self._replay[:0] = list(buffered)
        self._pending.extend(text[1:])
        return text[0]


def decode_bytes(data: Iterable[int]) -> List[KeyEvent]:
    """Decode a finite byte string; running out of bytes acts as a timeout."""
    stream = iter(data)

    def read_byte() -> Optional[int]:
        return next(stream, None)

    decoder = KeyDecoder(read_byte)
    keys: List[KeyEvent] = []
    while True:
        key = decoder.read_key()
        if key is None:
            return keys
        keys.append(key)
