"""Secondary input: joystick/gamepad events forwarded to the engine.

``JoystickDevice`` reads the Linux joystick API (``/dev/input/jsN``) and
translates raw button/axis events into ``InputEvent`` values. The adapter
loop runs on its own daemon thread and stops once the engine closes its
event channel.
"""

from __future__ import annotations

import array
import logging
import os
import struct
import threading
from dataclasses import dataclass
from fcntl import ioctl
from pathlib import Path
from typing import Protocol

from .channel import Channel
from .errors import ChannelClosed
from .events import FORWARDED_EVENTS, InputEvent

logger = logging.getLogger(__name__)

DEVICE_DIR = Path("/dev/input")
JS_EVENT_FORMAT = "IhBB"
JS_EVENT_SIZE = struct.calcsize(JS_EVENT_FORMAT)

# linux/joystick.h
JS_EVENT_BUTTON = 0x01
JS_EVENT_AXIS = 0x02
JS_EVENT_INIT = 0x80
JSIOCGAXES = 0x80016A11
JSIOCGBUTTONS = 0x80016A12
JSIOCGAXMAP = 0x80406A32
JSIOCGBTNMAP = 0x84006A34

# linux/input-event-codes.h
ABS_Y = 0x01
ABS_HAT0Y = 0x11
BTN_SOUTH = 0x130
BTN_DPAD_UP = 0x220
BTN_DPAD_DOWN = 0x221

VERTICAL_AXES = frozenset({ABS_Y, ABS_HAT0Y})
AXIS_THRESHOLD = 16384


@dataclass(frozen=True)
class JsEvent:
    """One raw event from a Linux joystick device."""

    time: int
    value: int
    event_type: int
    number: int

    @classmethod
    def unpack(cls, payload: bytes) -> JsEvent:
        return cls(*struct.unpack(JS_EVENT_FORMAT, payload))


class InputDevice(Protocol):
    """Blocking source of already-classified input events."""

    def read_event(self) -> InputEvent:
        """Block until the device produces an event."""
        ...

    def close(self) -> None:
        ...


class JoystickDevice:
    """Classify Linux joystick events into engine events.

    Vertical axes are edge-triggered: one move event fires when the axis
    leaves the neutral zone, and the axis must return to neutral before it
    fires again.
    """

    def __init__(
        self,
        stream,
        axis_codes: list[int] | None = None,
        button_codes: list[int] | None = None,
    ) -> None:
        self._stream = stream
        self.axis_codes = list(axis_codes or [])
        self.button_codes = list(button_codes or [])
        self._axis_direction: dict[int, int] = {}

    @classmethod
    def open(cls, path: Path) -> JoystickDevice:
        """Open ``path`` and query its axis/button code maps."""
        stream = open(path, "rb", buffering=0)
        try:
            axis_codes, button_codes = _query_code_maps(stream)
        except OSError:
            stream.close()
            raise
        logger.info("opened joystick %s (%d axes, %d buttons)", path, len(axis_codes), len(button_codes))
        return cls(stream, axis_codes, button_codes)

    def read_event(self) -> InputEvent:
        payload = self._read_exact(JS_EVENT_SIZE)
        return self.classify(JsEvent.unpack(payload))

    def classify(self, event: JsEvent) -> InputEvent:
        """Translate one raw event, updating axis edge state."""
        if event.event_type & JS_EVENT_INIT:
            return InputEvent.OTHER

        if event.event_type & JS_EVENT_BUTTON:
            if event.value != 1 or event.number >= len(self.button_codes):
                return InputEvent.OTHER
            code = self.button_codes[event.number]
            if code == BTN_SOUTH:
                return InputEvent.CONFIRM
            if code == BTN_DPAD_UP:
                return InputEvent.MOVE_UP
            if code == BTN_DPAD_DOWN:
                return InputEvent.MOVE_DOWN
            return InputEvent.OTHER

        if event.event_type & JS_EVENT_AXIS:
            if event.number >= len(self.axis_codes):
                return InputEvent.OTHER
            if self.axis_codes[event.number] not in VERTICAL_AXES:
                return InputEvent.OTHER
            direction = 0
            if event.value <= -AXIS_THRESHOLD:
                direction = -1
            elif event.value >= AXIS_THRESHOLD:
                direction = 1
            previous = self._axis_direction.get(event.number, 0)
            self._axis_direction[event.number] = direction
            if direction == previous or direction == 0:
                return InputEvent.OTHER
            return InputEvent.MOVE_UP if direction < 0 else InputEvent.MOVE_DOWN

        return InputEvent.OTHER

    def close(self) -> None:
        self._stream.close()

    def _read_exact(self, size: int) -> bytes:
        data = b""
        while len(data) < size:
            chunk = self._stream.read(size - len(data))
            if not chunk:
                raise EOFError("joystick device closed")
            data += chunk
        return data


def _query_code_maps(stream) -> tuple[list[int], list[int]]:
    buf = array.array("B", [0])
    ioctl(stream, JSIOCGAXES, buf)
    num_axes = buf[0]

    buf = array.array("B", [0])
    ioctl(stream, JSIOCGBUTTONS, buf)
    num_buttons = buf[0]

    axis_map = array.array("B", [0] * 0x40)
    ioctl(stream, JSIOCGAXMAP, axis_map)

    button_map = array.array("H", [0] * 0x200)
    ioctl(stream, JSIOCGBTNMAP, button_map)

    return list(axis_map[:num_axes]), list(button_map[:num_buttons])


def find_joystick(device_dir: Path = DEVICE_DIR) -> Path | None:
    """Return the lowest-numbered ``jsN`` node in ``device_dir``, if any."""
    try:
        names = os.listdir(device_dir)
    except OSError:
        return None
    candidates = sorted(
        (name for name in names if name.startswith("js") and name[2:].isdigit()),
        key=lambda name: int(name[2:]),
    )
    return device_dir / candidates[0] if candidates else None


def open_default_device(path: Path | None = None) -> JoystickDevice | None:
    """Open the configured or first available joystick.

    Returns ``None`` when no device exists or it cannot be opened; the picker
    then runs on keyboard input alone.
    """
    target = path if path is not None else find_joystick()
    if target is None:
        logger.debug("no joystick device found")
        return None
    try:
        return JoystickDevice.open(target)
    except OSError as exc:
        logger.warning("cannot open joystick %s: %s", target, exc)
        return None


def run_input_adapter(device: InputDevice, events: Channel[InputEvent]) -> None:
    """Forward meaningful device events until the engine stops listening.

    The device is closed on every exit.
    """
    try:
        while True:
            try:
                event = device.read_event()
            except (OSError, EOFError) as exc:
                logger.warning("secondary input stopped: %s", exc)
                return
            if event not in FORWARDED_EVENTS:
                continue
            try:
                events.send(event)
            except ChannelClosed:
                logger.debug("event channel closed; input adapter exiting")
                return
    finally:
        close_device(device)


def close_device(device: InputDevice) -> None:
    """Close ``device``, logging rather than raising an ``OSError``."""
    try:
        device.close()
    except OSError as exc:
        logger.warning("closing secondary input failed: %s", exc)


def start_input_adapter(device: InputDevice, events: Channel[InputEvent]) -> threading.Thread:
    """Run ``run_input_adapter`` on a daemon thread and return it."""
    worker = threading.Thread(
        target=run_input_adapter,
        args=(device, events),
        name="termpick-input-adapter",
        daemon=True,
    )
    worker.start()
    return worker


__all__ = [
    "InputDevice",
    "JoystickDevice",
    "JsEvent",
    "find_joystick",
    "close_device",
    "open_default_device",
    "run_input_adapter",
    "start_input_adapter",
]
