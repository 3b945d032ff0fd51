"""Persistent JSON config helpers.

Stores screen-layout overrides, loop timing, and the joystick device path.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
from dataclasses import fields, replace
from pathlib import Path

from platformdirs import user_config_dir

from .layout import DEFAULT_LAYOUT, DEFAULT_TIMING, EngineTiming, ScreenLayout

APP_NAME = "termpick"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _coerce_nonnegative_int(value: object) -> int | None:
    """Accept plain non-negative ints; booleans and other types are rejected."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value >= 0 else None


def load_layout(config: dict[str, object] | None = None) -> ScreenLayout:
    """Build a ``ScreenLayout`` from the ``layout`` config object.

    Each field is validated on its own; invalid entries keep their default.
    ``marker`` and ``placeholder`` must be non-empty strings.
    """
    data = load_config() if config is None else config
    raw = data.get("layout")
    if not isinstance(raw, dict):
        return DEFAULT_LAYOUT

    overrides: dict[str, object] = {}
    for field in fields(ScreenLayout):
        if field.name not in raw:
            continue
        value = raw[field.name]
        if field.type in {"int", int}:
            coerced = _coerce_nonnegative_int(value)
            if coerced is not None:
                overrides[field.name] = coerced
        elif isinstance(value, str) and value:
            overrides[field.name] = value
    return replace(DEFAULT_LAYOUT, **overrides)


def load_timing(config: dict[str, object] | None = None) -> EngineTiming:
    """Read ``tick_seconds`` and ``key_poll_ms`` overrides."""
    data = load_config() if config is None else config
    timing = DEFAULT_TIMING

    tick = data.get("tick_seconds")
    if isinstance(tick, (int, float)) and not isinstance(tick, bool) and 0 < tick <= 1:
        timing = replace(timing, tick_seconds=float(tick))

    poll = _coerce_nonnegative_int(data.get("key_poll_ms"))
    if poll is not None and poll <= 1000:
        timing = replace(timing, key_poll_ms=poll)
    return timing


def load_device_path(config: dict[str, object] | None = None) -> Path | None:
    """Return the configured joystick path, or ``None`` when unset/invalid."""
    data = load_config() if config is None else config
    value = data.get("device")
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return Path(stripped) if stripped else None


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "load_config",
    "load_layout",
    "load_timing",
    "load_device_path",
]
