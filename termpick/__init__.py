"""Public package surface for termpick.

Exports the ``Picker`` handle, the one-shot ``pick`` helper, and ``main`` for
programmatic CLI invocation.
"""

from __future__ import annotations

import logging

from .errors import ChannelClosed, PickerError, TerminalIoError
from .events import InputEvent
from .layout import EngineTiming, ScreenLayout
from .picker import Picker, pick

logging.getLogger(__name__).addHandler(logging.NullHandler())


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "ChannelClosed",
    "EngineTiming",
    "InputEvent",
    "Picker",
    "PickerError",
    "ScreenLayout",
    "TerminalIoError",
    "main",
    "pick",
]
