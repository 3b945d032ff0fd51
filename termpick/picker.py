"""Public picker handle.

``Picker`` starts the selection engine on a background thread as soon as it
is constructed. Callers stream options in with ``add_option``/``add_options``
at any time and finally block on ``wait_choice``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from functools import partial
from typing import Generic, TypeVar

from .channel import Channel
from .config import load_config, load_device_path, load_layout, load_timing
from .device import InputDevice, open_default_device
from .engine import SelectionResult, Surface, run_selection
from .layout import EngineTiming, ScreenLayout
from .terminal import TerminalSurface

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Sentinel: probe for a joystick (configured path first) on construction.
DEFAULT_DEVICE = object()


class Picker(Generic[T]):
    """Handle on one interactive single-choice selection running in the background."""

    def __init__(
        self,
        prompt: str,
        *,
        device: InputDevice | None | object = DEFAULT_DEVICE,
        surface_factory: Callable[[], Surface] | None = None,
        layout: ScreenLayout | None = None,
        timing: EngineTiming | None = None,
    ) -> None:
        config = load_config() if layout is None or timing is None or device is DEFAULT_DEVICE else {}
        if layout is None:
            layout = load_layout(config)
        if timing is None:
            timing = load_timing(config)
        if device is DEFAULT_DEVICE:
            device = open_default_device(load_device_path(config))
        if surface_factory is None:
            surface_factory = partial(TerminalSurface.open_tty, layout)

        self._item_feed: Channel[T] = Channel()
        self._result: SelectionResult[T] | None = None
        self._failure: BaseException | None = None
        self._thread = threading.Thread(
            target=self._run,
            args=(prompt, surface_factory, device, timing),
            name="termpick-engine",
            daemon=True,
        )
        self._thread.start()

    def _run(
        self,
        prompt: str,
        surface_factory: Callable[[], Surface],
        device: InputDevice | None,
        timing: EngineTiming,
    ) -> None:
        try:
            self._result = run_selection(
                prompt,
                self._item_feed,
                surface_factory=surface_factory,
                device=device,
                timing=timing,
            )
        except Exception as exc:
            # Surfaced to the caller by wait_result().
            logger.exception("selection thread crashed")
            self._item_feed.close()
            self._failure = exc

    def is_chosen(self) -> bool:
        """Return whether the engine thread has finished, without blocking."""
        return not self._thread.is_alive()

    def add_option(self, option: T) -> None:
        """Append one option; raises ``ChannelClosed`` if the engine already exited."""
        self._item_feed.send(option)

    def add_options(self, options: Iterable[T]) -> None:
        """Append options in order, stopping at the first ``ChannelClosed``."""
        for option in options:
            self._item_feed.send(option)

    def wait_result(self) -> SelectionResult[T]:
        """Block until the engine finishes and return its raw result."""
        self._thread.join()
        if self._result is None:
            raise RuntimeError("selection thread ended without a result") from self._failure
        return self._result

    def wait_choice(self) -> T:
        """Block until the user picks; return the item or raise ``TerminalIoError``."""
        return self.wait_result().unwrap()


def pick(prompt: str, options: Iterable[T], **kwargs) -> T:
    """Run a picker over ``options`` and return the chosen one."""
    picker: Picker[T] = Picker(prompt, **kwargs)
    picker.add_options(options)
    return picker.wait_choice()


__all__ = ["Picker", "DEFAULT_DEVICE", "pick"]
