"""Screen geometry and loop timing for the selection engine."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScreenLayout:
    """Fixed anchor coordinates (0-based cells) used by the terminal surface.

    The prompt is written at ``(prompt_x, prompt_y)``; item ``i`` is written at
    ``(origin_x, origin_y + i)`` and its marker at ``(marker_x, origin_y + i)``.
    """

    prompt_x: int = 1
    prompt_y: int = 1
    origin_x: int = 4
    origin_y: int = 3
    marker_x: int = 1
    marker: str = "=>"
    placeholder: str = "<No options supplied>"

    def item_row(self, index: int) -> int:
        return self.origin_y + index


@dataclass(frozen=True)
class EngineTiming:
    """Tick cadence and terminal-input poll window."""

    tick_seconds: float = 0.05
    key_poll_ms: int = 10


DEFAULT_LAYOUT = ScreenLayout()
DEFAULT_TIMING = EngineTiming()

__all__ = ["ScreenLayout", "EngineTiming", "DEFAULT_LAYOUT", "DEFAULT_TIMING"]
