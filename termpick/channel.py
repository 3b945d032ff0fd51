"""Unbounded one-way channels between producer threads and the engine.

Producers call ``send``; the single consumer drains with ``try_recv`` and
closes the channel when it exits so late producers fail loudly.
"""

from __future__ import annotations

import threading
from queue import Empty, Queue
from typing import Generic, TypeVar

from .errors import ChannelClosed

T = TypeVar("T")


class Channel(Generic[T]):
    """Multiple-producer/single-consumer queue with explicit close."""

    def __init__(self) -> None:
        self._queue: Queue[T] = Queue()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, value: T) -> None:
        """Enqueue ``value`` or raise ``ChannelClosed`` if the consumer is gone."""
        with self._lock:
            if self._closed:
                raise ChannelClosed(value)
            self._queue.put(value)

    def try_recv(self) -> T:
        """Return the oldest pending value without blocking.

        Raises ``queue.Empty`` when nothing is pending.
        """
        return self._queue.get_nowait()

    def close(self) -> None:
        with self._lock:
            self._closed = True


__all__ = ["Channel", "Empty"]
