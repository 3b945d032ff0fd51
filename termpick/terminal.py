"""Terminal surface for the picker session.

Owns raw-mode lifecycle and alternate-screen switching, and queues the few
drawing primitives the engine needs. Nothing reaches the terminal until
``flush`` is called.
"""

from __future__ import annotations

import contextlib
import os
import termios
import tty

from .errors import TerminalIoError
from .input import read_key
from .layout import DEFAULT_LAYOUT, ScreenLayout

TTY_PATH = "/dev/tty"

ENTER_SEQUENCE = "\x1b[?1049h\x1b[?25l"
LEAVE_SEQUENCE = "\x1b[?25h\x1b[?1049l"
CLEAR_SCREEN = "\x1b[2J"


def move_to(x: int, y: int) -> str:
    """Return a cursor-position sequence for 0-based cell coordinates."""
    return f"\x1b[{y + 1};{x + 1}H"


class TerminalSurface:
    """Enter/leave interactive mode and draw the menu on one terminal."""

    def __init__(
        self,
        input_fd: int,
        output_fd: int,
        layout: ScreenLayout = DEFAULT_LAYOUT,
        *,
        owns_fds: bool = False,
    ) -> None:
        self.input_fd = input_fd
        self.output_fd = output_fd
        self.layout = layout
        self._owns_fds = owns_fds
        self._saved_tty_state: list | None = None
        self._pending: list[str] = []
        self._pending_input: list[bytes] = []
        self._active = False

    @classmethod
    def open_tty(cls, layout: ScreenLayout = DEFAULT_LAYOUT) -> TerminalSurface:
        """Open the controlling terminal directly, leaving stdin/stdout to the caller."""
        try:
            fd = os.open(TTY_PATH, os.O_RDWR | os.O_NOCTTY)
        except OSError as exc:
            raise TerminalIoError(f"cannot open {TTY_PATH}: {exc}") from exc
        return cls(fd, fd, layout, owns_fds=True)

    @property
    def active(self) -> bool:
        return self._active

    def enter_interactive_mode(self) -> None:
        """Switch to the alternate screen, hide the cursor, and enable raw input."""
        try:
            self._saved_tty_state = termios.tcgetattr(self.input_fd)
            tty.setraw(self.input_fd, termios.TCSAFLUSH)
            self._active = True
            self._write_all(ENTER_SEQUENCE)
        except (OSError, termios.error) as exc:
            raise TerminalIoError(f"cannot enter interactive mode: {exc}") from exc

    def leave_interactive_mode(self) -> None:
        """Undo ``enter_interactive_mode``.

        Every restore step is attempted even when an earlier one fails; the
        first failure is raised afterwards. Calling this while inactive is a
        no-op.
        """
        if not self._active:
            return
        self._active = False
        self._pending.clear()
        first_error: BaseException | None = None
        try:
            self._write_all(LEAVE_SEQUENCE)
        except (OSError, termios.error) as exc:
            first_error = exc
        if self._saved_tty_state is not None:
            try:
                termios.tcsetattr(self.input_fd, termios.TCSAFLUSH, self._saved_tty_state)
            except (OSError, termios.error) as exc:
                first_error = first_error or exc
        if first_error is not None:
            raise TerminalIoError(f"cannot restore terminal: {first_error}") from first_error

    def draw_menu(self, prompt: str, labels: list[str]) -> None:
        """Queue a full repaint: prompt at its anchor, one item per row below."""
        layout = self.layout
        out = [CLEAR_SCREEN, move_to(layout.prompt_x, layout.prompt_y), prompt]
        if not labels:
            out.append(move_to(layout.origin_x, layout.origin_y))
            out.append(layout.placeholder)
        for index, label in enumerate(labels):
            out.append(move_to(layout.origin_x, layout.item_row(index)))
            out.append(label)
        self._pending.append("".join(out))

    def draw_cursor_marker(self, position: int, previous: int) -> None:
        """Queue erasing the marker at ``previous`` and drawing it at ``position``."""
        layout = self.layout
        blank = " " * len(layout.marker)
        self._pending.append(
            move_to(layout.marker_x, layout.item_row(previous))
            + blank
            + move_to(layout.marker_x, layout.item_row(position))
            + layout.marker
        )

    def flush(self) -> None:
        """Write everything queued since the last flush in one batch."""
        if not self._pending:
            return
        payload = "".join(self._pending)
        self._pending.clear()
        try:
            self._write_all(payload)
        except OSError as exc:
            raise TerminalIoError(f"cannot write to terminal: {exc}") from exc

    def poll_key(self, timeout_ms: int) -> str:
        """Wait up to ``timeout_ms`` for one key token; ``""`` when none arrived."""
        try:
            return read_key(self.input_fd, timeout_ms=timeout_ms, pending=self._pending_input)
        except OSError as exc:
            raise TerminalIoError(f"cannot read from terminal: {exc}") from exc

    def close(self) -> None:
        """Release file descriptors opened by ``open_tty``."""
        if not self._owns_fds:
            return
        self._owns_fds = False
        fds = {self.input_fd, self.output_fd}
        for fd in fds:
            with contextlib.suppress(OSError):
                os.close(fd)

    def _write_all(self, text: str) -> None:
        data = text.encode("utf-8", errors="replace")
        while data:
            written = os.write(self.output_fd, data)
            data = data[written:]


__all__ = ["TerminalSurface", "TTY_PATH", "move_to"]
