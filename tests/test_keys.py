import sys
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from kiloed.keys import (
    TRANSITIONS,
    DecoderState,
    Key,
    KeyDecoder,
    ctrl_key,
    decode_bytes,
)


class TestEscapeDecoding(unittest.TestCase):
    def test_arrow_letters(self):
        self.assertEqual(decode_bytes(b"\x1b[A"), [Key.ARROW_UP])
        self.assertEqual(decode_bytes(b"\x1b[B"), [Key.ARROW_DOWN])
        self.assertEqual(decode_bytes(b"\x1b[C"), [Key.ARROW_RIGHT])
        self.assertEqual(decode_bytes(b"\x1b[D"), [Key.ARROW_LEFT])
        self.assertEqual(decode_bytes(b"\x1b[H"), [Key.HOME])
        self.assertEqual(decode_bytes(b"\x1b[F"), [Key.END])

    def test_digit_tilde_table(self):
        expected = {
            b"1": Key.HOME,
            b"3": Key.DELETE,
            b"4": Key.END,
            b"5": Key.PAGE_UP,
            b"6": Key.PAGE_DOWN,
            b"7": Key.HOME,
            b"8": Key.END,
        }
        for digit, key in expected.items():
            with self.subTest(digit=digit):
                self.assertEqual(decode_bytes(b"\x1b[" + digit + b"~"), [key])

    def test_unmapped_digit_is_bare_escape(self):
        self.assertEqual(decode_bytes(b"\x1b[9~"), [Key.ESCAPE])
        self.assertEqual(decode_bytes(b"\x1b[2~"), [Key.ESCAPE])

    def test_lone_escape_times_out_to_escape(self):
        self.assertEqual(decode_bytes(b"\x1b"), [Key.ESCAPE])

    def test_incomplete_sequences_degrade_to_escape(self):
        self.assertEqual(decode_bytes(b"\x1b["), [Key.ESCAPE])
        self.assertEqual(decode_bytes(b"\x1b[3"), [Key.ESCAPE])

    def test_malformed_sequences_degrade_to_escape(self):
        self.assertEqual(decode_bytes(b"\x1bx"), [Key.ESCAPE])
        self.assertEqual(decode_bytes(b"\x1b[Z"), [Key.ESCAPE])
        self.assertEqual(decode_bytes(b"\x1b[5x"), [Key.ESCAPE])

    def test_bytes_after_sequence_are_separate_keys(self):
        self.assertEqual(decode_bytes(b"\x1b[Aab"), [Key.ARROW_UP, "a", "b"])


class TestTransitions(unittest.TestCase):
    def test_escape_state(self):
        self.assertEqual(
            TRANSITIONS[DecoderState.SAW_ESCAPE]("[", None),
            (DecoderState.SAW_BRACKET, None, None),
        )
        self.assertEqual(
            TRANSITIONS[DecoderState.SAW_ESCAPE]("O", None),
            (DecoderState.IDLE, Key.ESCAPE, None),
        )

    def test_bracket_state(self):
        self.assertEqual(
            TRANSITIONS[DecoderState.SAW_BRACKET]("5", None),
            (DecoderState.SAW_DIGIT, None, "5"),
        )
        self.assertEqual(
            TRANSITIONS[DecoderState.SAW_BRACKET]("A", None),
            (DecoderState.IDLE, Key.ARROW_UP, None),
        )
        self.assertEqual(
            TRANSITIONS[DecoderState.SAW_BRACKET]("q", None),
            (DecoderState.IDLE, Key.ESCAPE, None),
        )

    def test_digit_state(self):
        self.assertEqual(
            TRANSITIONS[DecoderState.SAW_DIGIT]("~", "6"),
            (DecoderState.IDLE, Key.PAGE_DOWN, None),
        )
        self.assertEqual(
            TRANSITIONS[DecoderState.SAW_DIGIT]("A", "6"),
            (DecoderState.IDLE, Key.ESCAPE, None),
        )


class TestPlainBytes(unittest.TestCase):
    def test_backspace_byte(self):
        self.assertEqual(decode_bytes(bytes([127])), [Key.BACKSPACE])

    def test_literal_and_control_characters(self):
        self.assertEqual(decode_bytes(b"a\t\r"), ["a", "\t", "\r"])
        self.assertEqual(decode_bytes(b"\x11\x13"), [ctrl_key("q"), ctrl_key("s")])

    def test_ctrl_key_masks_low_bits(self):
        self.assertEqual(ctrl_key("q"), "\x11")
        self.assertEqual(ctrl_key("h"), "\x08")

    def test_utf8_multibyte_character(self):
        self.assertEqual(decode_bytes("é€".encode("utf-8")), ["é", "€"])

    def test_broken_utf8_keeps_raw_byte(self):
        self.assertEqual(decode_bytes(b"\xc3"), ["\udcc3"])
        self.assertEqual(decode_bytes(b"\xc3a"), ["\udcc3", "a"])

    def test_escape_after_broken_utf8_still_decodes(self):
        self.assertEqual(decode_bytes(b"\xc3\x1b[A"), ["\udcc3", Key.ARROW_UP])
        self.assertEqual(decode_bytes(b"\xe2\x82\x1b[3~"), ["\udce2", "\udc82", Key.DELETE])
        self.assertEqual(decode_bytes(b"\xc3\x7f"), ["\udcc3", Key.BACKSPACE])

    def test_new_lead_byte_restarts_sequence(self):
        self.assertEqual(decode_bytes(b"\xc3\xc3\xa9"), ["\udcc3", "\u00e9"])

    def test_no_byte_means_no_key(self):
        decoder = KeyDecoder(lambda: None)
        self.assertIsNone(decoder.read_key())


if __name__ == "__main__":
    unittest.main()
