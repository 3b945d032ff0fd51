"""Exception types raised by the picker runtime."""

from __future__ import annotations


class PickerError(Exception):
    """Base class for picker failures."""


class TerminalIoError(PickerError):
    """A terminal operation (mode switch, draw, flush, key read) failed.

    Always fatal to the current picker invocation. The underlying OS error is
    chained as ``__cause__``.
    """


class ChannelClosed(PickerError):
    """A value was sent after the receiving side stopped listening.

    The rejected value is kept on ``value`` so callers can tell what was dropped.
    """

    def __init__(self, value: object) -> None:
        super().__init__("channel is closed; the selection engine has already exited")
        self.value = value


__all__ = ["PickerError", "TerminalIoError", "ChannelClosed"]
