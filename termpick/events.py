"""Event vocabulary shared by keyboard and secondary-device input."""

from __future__ import annotations

from enum import Enum


class InputEvent(Enum):
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    CONFIRM = "confirm"
    OTHER = "other"


# Only these ever cross the device adapter's channel.
FORWARDED_EVENTS = frozenset({InputEvent.MOVE_UP, InputEvent.MOVE_DOWN, InputEvent.CONFIRM})


def cursor_delta(event: InputEvent) -> int:
    """Return the cursor movement implied by ``event``."""
    if event is InputEvent.MOVE_UP:
        return -1
    if event is InputEvent.MOVE_DOWN:
        return 1
    return 0


__all__ = ["InputEvent", "FORWARDED_EVENTS", "cursor_delta"]
