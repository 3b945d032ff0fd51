"""Low-level terminal input decoding.

Reads raw bytes from the terminal and translates them into normalized key
tokens. Handles ESC-sequence timing so a lone ESC never swallows the next key.
"""

from __future__ import annotations

import os
import select

from .events import InputEvent

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

KEY_ACTIONS: dict[str, InputEvent] = {
    "ENTER_CR": InputEvent.CONFIRM,
    "ENTER_LF": InputEvent.CONFIRM,
    "UP": InputEvent.MOVE_UP,
    "DOWN": InputEvent.MOVE_DOWN,
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def read_key(fd: int, timeout_ms: int | None = None, pending: list[bytes] | None = None) -> str:
    """Return the next key token, or ``""`` when nothing arrives in time.

    Bytes read ahead while probing an escape sequence are kept in ``pending``
    for the next call. Each reader passes its own list; bare calls share the
    module-level one.
    """
    if pending is None:
        pending = _PENDING_BYTES
    if pending:
        ch = pending.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    if ch == b"\r":
        return "ENTER_CR"
    if ch == b"\n":
        return "ENTER_LF"
    if ch == b"\t":
        return "TAB"
    if ch in {b"\x08", b"\x7f"}:
        return "BACKSPACE"
    if ch == b"\x03":
        return "CTRL_C"

    if ch != b"\x1b":
        return ch.decode("utf-8", errors="replace")

    # Escape / arrow key sequences, in both CSI (ESC [) and SS3 (ESC O) form.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq not in {b"[", b"O"}:
        pending.append(seq)
        return "ESC"
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq == b"A":
        return "UP"
    if seq == b"B":
        return "DOWN"
    if seq == b"C":
        return "RIGHT"
    if seq == b"D":
        return "LEFT"
    return "ESC"


def key_event(key: str) -> InputEvent:
    """Map a key token to the engine's event vocabulary."""
    return KEY_ACTIONS.get(key, InputEvent.OTHER)


__all__ = ["ESC_SEQUENCE_TIMEOUT_MS", "KEY_ACTIONS", "read_key", "key_event"]
