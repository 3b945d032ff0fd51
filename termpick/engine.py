"""Selection engine: the picker's event loop and state machine.

Merges three sources each tick (the item feed, secondary-device events, and
terminal keys), redraws only what went stale, and finishes once a confirm
arrives while at least one item exists.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from queue import Empty
from typing import Generic, Protocol, TypeVar

from .channel import Channel
from .device import InputDevice, close_device, start_input_adapter
from .errors import TerminalIoError
from .events import InputEvent, cursor_delta
from .input import key_event
from .layout import DEFAULT_TIMING, EngineTiming

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Surface(Protocol):
    """Terminal operations the engine drives (see ``TerminalSurface``)."""

    def enter_interactive_mode(self) -> None: ...

    def leave_interactive_mode(self) -> None: ...

    def draw_menu(self, prompt: str, labels: list[str]) -> None: ...

    def draw_cursor_marker(self, position: int, previous: int) -> None: ...

    def flush(self) -> None: ...

    def poll_key(self, timeout_ms: int) -> str: ...


@dataclass(frozen=True)
class SelectionResult(Generic[T]):
    """Outcome of one picker run: the chosen item or the terminal failure."""

    item: T | None = None
    error: TerminalIoError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the chosen item, raising the stored failure instead if any."""
        if self.error is not None:
            raise self.error
        return self.item  # type: ignore[return-value]


class SelectionEngine(Generic[T]):
    """Own the item list, cursor, and redraw flags for one picker session.

    All state is touched only from the thread calling ``run``; other threads
    reach the engine through ``item_feed`` and ``events`` alone.
    """

    def __init__(
        self,
        prompt: str,
        surface: Surface,
        item_feed: Channel[T],
        events: Channel[InputEvent],
        timing: EngineTiming = DEFAULT_TIMING,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.prompt = prompt
        self.surface = surface
        self.item_feed = item_feed
        self.events = events
        self.timing = timing
        self._sleep = sleep

        self.items: list[T] = []
        self.labels: list[str] = []
        self.cursor = 0
        self.marker_row = 0
        self.menu_dirty = True
        self.marker_dirty = True
        self.pending_confirm = False

    def _apply_event(self, event: InputEvent, delta: int) -> int:
        if event is InputEvent.CONFIRM:
            self.pending_confirm = True
            return delta
        step = cursor_delta(event)
        return step if step != 0 else delta

    def _clamped(self, position: int) -> int:
        if not self.items:
            return 0
        return max(0, min(position, len(self.items) - 1))

    def tick(self) -> bool:
        """Run one loop iteration; return ``True`` once a pick is confirmed."""
        delta = 0

        try:
            item = self.item_feed.try_recv()
        except Empty:
            pass
        else:
            self.items.append(item)
            self.labels.append(str(item))
            self.menu_dirty = True

        try:
            event = self.events.try_recv()
        except Empty:
            pass
        else:
            delta = self._apply_event(event, delta)

        key = self.surface.poll_key(self.timing.key_poll_ms)
        if key:
            delta = self._apply_event(key_event(key), delta)

        if delta != 0:
            self.marker_dirty = True

        if self.menu_dirty:
            self.surface.draw_menu(self.prompt, self.labels)
            self.marker_dirty = True

        self.cursor = self._clamped(self.cursor + delta)

        # An empty list has no row to mark; the placeholder occupies it and
        # no "=>" is drawn beside it.
        if self.marker_dirty and self.items:
            self.surface.draw_cursor_marker(self.cursor, self.marker_row)
            self.marker_row = self.cursor

        done = False
        if self.pending_confirm and self.items:
            done = True
        self.pending_confirm = False

        if self.menu_dirty or self.marker_dirty:
            self.surface.flush()

        self.menu_dirty = False
        self.marker_dirty = False
        return done

    def run(self) -> SelectionResult[T]:
        """Drive the loop until a pick, then restore the terminal and hand it back.

        Terminal failures end the run immediately and are returned, never
        retried. Any other exception restores the terminal and propagates.
        Both channels are closed on every exit path.
        """
        try:
            self.surface.enter_interactive_mode()
            while not self.tick():
                self._sleep(self.timing.tick_seconds)
            self.surface.leave_interactive_mode()
        except TerminalIoError as exc:
            logger.error("picker aborted: %s", exc)
            self._restore_after_failure()
            return SelectionResult(error=exc)
        except BaseException:
            self._restore_after_failure()
            raise
        finally:
            self.item_feed.close()
            self.events.close()

        self.labels.pop(self.cursor)
        chosen = self.items.pop(self.cursor)
        logger.debug("picked index %d of %d", self.cursor, len(self.items) + 1)
        return SelectionResult(item=chosen)

    def _restore_after_failure(self) -> None:
        try:
            self.surface.leave_interactive_mode()
        except TerminalIoError as exc:
            logger.error("terminal restore failed after abort: %s", exc)


def run_selection(
    prompt: str,
    item_feed: Channel[T],
    *,
    surface_factory: Callable[[], Surface],
    device: InputDevice | None = None,
    timing: EngineTiming = DEFAULT_TIMING,
) -> SelectionResult[T]:
    """Open the surface, start the device adapter, and run one engine to completion."""
    try:
        surface = surface_factory()
    except TerminalIoError as exc:
        item_feed.close()
        if device is not None:
            close_device(device)
        return SelectionResult(error=exc)

    events: Channel[InputEvent] = Channel()
    if device is not None:
        start_input_adapter(device, events)

    try:
        return SelectionEngine(prompt, surface, item_feed, events, timing).run()
    finally:
        close = getattr(surface, "close", None)
        if close is not None:
            close()


__all__ = ["SelectionEngine", "SelectionResult", "Surface", "run_selection"]
