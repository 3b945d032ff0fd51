"""Regression tests for raw-key decoding.

Covers ESC timing, arrow sequences, and the key-to-event mapping the engine
relies on.
"""

import os
import time
import unittest

from termpick import input as input_mod
from termpick.events import InputEvent


class ReadKeyRegressionTests(unittest.TestCase):
    def setUp(self) -> None:
        input_mod._PENDING_BYTES.clear()
        self.read_fd, self.write_fd = os.pipe()

    def tearDown(self) -> None:
        input_mod._PENDING_BYTES.clear()
        os.close(self.read_fd)
        os.close(self.write_fd)

    def test_timeout_without_input_returns_empty_token(self) -> None:
        started = time.monotonic()
        key = input_mod.read_key(self.read_fd, timeout_ms=10)
        elapsed = time.monotonic() - started

        self.assertEqual(key, "")
        self.assertLess(elapsed, 0.5)

    def test_single_escape_returns_esc_without_second_keypress(self) -> None:
        os.write(self.write_fd, b"\x1b")
        started = time.monotonic()
        key = input_mod.read_key(self.read_fd, timeout_ms=20)
        elapsed = time.monotonic() - started

        self.assertEqual(key, "ESC")
        # Esc waits briefly for sequence bytes, but should not require another key press.
        self.assertLess(elapsed, 0.2)

    def test_arrow_sequences_are_recognized(self) -> None:
        os.write(self.write_fd, b"\x1b[A\x1b[B\x1bOA\x1bOB")

        keys = [input_mod.read_key(self.read_fd, timeout_ms=20) for _ in range(4)]

        self.assertEqual(keys, ["UP", "DOWN", "UP", "DOWN"])

    def test_escape_does_not_swallow_following_printable_key(self) -> None:
        os.write(self.write_fd, b"\x1ba")
        first = input_mod.read_key(self.read_fd, timeout_ms=20)
        second = input_mod.read_key(self.read_fd, timeout_ms=20)

        self.assertEqual(first, "ESC")
        self.assertEqual(second, "a")

    def test_pushed_back_byte_stays_with_its_own_pending_list(self) -> None:
        mine: list[bytes] = []
        os.write(self.write_fd, b"\x1bz")

        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20, pending=mine), "ESC")
        self.assertEqual(mine, [b"z"])
        self.assertEqual(input_mod._PENDING_BYTES, [])
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=0), "")
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=0, pending=mine), "z")

    def test_enter_variants_are_recognized(self) -> None:
        os.write(self.write_fd, b"\r\n")

        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "ENTER_CR")
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "ENTER_LF")


class KeyEventMappingTests(unittest.TestCase):
    def test_enter_and_arrows_map_to_engine_events(self) -> None:
        self.assertIs(input_mod.key_event("ENTER_CR"), InputEvent.CONFIRM)
        self.assertIs(input_mod.key_event("ENTER_LF"), InputEvent.CONFIRM)
        self.assertIs(input_mod.key_event("UP"), InputEvent.MOVE_UP)
        self.assertIs(input_mod.key_event("DOWN"), InputEvent.MOVE_DOWN)

    def test_other_keys_map_to_other(self) -> None:
        for key in ("a", "ESC", "LEFT", "RIGHT", "TAB", "CTRL_C", ""):
            self.assertIs(input_mod.key_event(key), InputEvent.OTHER)


if __name__ == "__main__":
    unittest.main()
