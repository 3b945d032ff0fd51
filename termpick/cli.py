"""Command-line front door for termpick.

Reads options from stdin (one per line) while the picker is already on
screen, then prints the chosen option to stdout.
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from pathlib import Path
from typing import TextIO

from .device import open_default_device
from .errors import ChannelClosed, TerminalIoError
from .picker import DEFAULT_DEVICE, Picker

USAGE_LINES = (
    "1st argument has to be prompt for selection",
    r"All stdin input is options, separated by a \n character",
)
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
STDIN_THREAD_NAME = "termpick-stdin"

logger = logging.getLogger(__name__)


class _UsageError(Exception):
    pass


class _ArgumentParser(argparse.ArgumentParser):
    """Report bad arguments through the usage lines instead of exiting 2."""

    def error(self, message: str) -> None:
        raise _UsageError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="termpick",
        description="Pick one line from stdin in an interactive terminal menu.",
    )
    parser.add_argument("prompt", nargs="*", help="Prompt shown above the options.")
    parser.add_argument("--device", type=Path, default=None, help="Joystick device to read (e.g. /dev/input/js0).")
    parser.add_argument("--no-device", action="store_true", help="Use keyboard input only.")
    parser.add_argument("--log-file", type=Path, default=None, help="Append debug logs to this file.")
    return parser


def configure_logging(log_file: Path | None) -> None:
    """Attach a file handler to the package logger when ``log_file`` is set.

    The terminal is owned by the picker while it runs, so logs never go to a
    stream handler.
    """
    if log_file is None:
        return
    handler = logging.FileHandler(log_file)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger = logging.getLogger("termpick")
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)


def stream_options(picker: Picker[str], source: TextIO) -> int:
    """Feed stripped lines from ``source`` into ``picker`` as they arrive.

    Stops early when the picker has already finished. Returns how many
    options were delivered. ``main`` runs this on a daemon thread so a
    stalled producer never delays printing the choice.
    """
    sent = 0
    for line in source:
        try:
            picker.add_option(line.strip())
        except ChannelClosed:
            logger.debug("picker finished before stdin was exhausted; %d options sent", sent)
            break
        sent += 1
    return sent


def _print_usage() -> int:
    for line in USAGE_LINES:
        print(line, file=sys.stderr)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the picker over stdin, and print the choice.

    A missing or repeated prompt, or a malformed option, prints the usage
    text to stderr and exits 0. Unknown dash-prefixed words count as prompt
    text, so ``termpick -x`` uses "-x" as its prompt.
    """
    try:
        args, unknown = _build_parser().parse_known_args(argv)
    except _UsageError as exc:
        logger.debug("bad arguments: %s", exc)
        return _print_usage()
    prompts = args.prompt + unknown
    if len(prompts) != 1:
        return _print_usage()

    configure_logging(args.log_file)

    if args.no_device:
        device = None
    elif args.device is not None:
        device = open_default_device(args.device)
    else:
        device = DEFAULT_DEVICE

    picker: Picker[str] = Picker(prompts[0], device=device)
    feeder = threading.Thread(
        target=stream_options,
        args=(picker, sys.stdin),
        name=STDIN_THREAD_NAME,
        daemon=True,
    )
    feeder.start()

    try:
        choice = picker.wait_choice()
    except TerminalIoError as exc:
        print(f"termpick: {exc}", file=sys.stderr)
        return 1

    print(choice)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
