"""Channel send/receive/close semantics shared by the item feed and event channel."""

from __future__ import annotations

import threading
import unittest
from queue import Empty

from termpick.channel import Channel
from termpick.errors import ChannelClosed


class ChannelTests(unittest.TestCase):
    def test_values_arrive_in_send_order(self) -> None:
        channel: Channel[int] = Channel()
        for value in range(3):
            channel.send(value)

        self.assertEqual([channel.try_recv() for _ in range(3)], [0, 1, 2])

    def test_try_recv_on_empty_channel_raises_empty(self) -> None:
        with self.assertRaises(Empty):
            Channel().try_recv()

    def test_send_after_close_raises_with_value(self) -> None:
        channel: Channel[str] = Channel()
        channel.close()
        channel.close()

        with self.assertRaises(ChannelClosed) as ctx:
            channel.send("dropped")

        self.assertTrue(channel.closed)
        self.assertEqual(ctx.exception.value, "dropped")

    def test_values_sent_before_close_remain_receivable(self) -> None:
        channel: Channel[str] = Channel()
        channel.send("kept")
        channel.close()

        self.assertEqual(channel.try_recv(), "kept")

    def test_concurrent_producers_deliver_every_value(self) -> None:
        channel: Channel[int] = Channel()

        def _produce(base: int) -> None:
            for offset in range(100):
                channel.send(base + offset)

        workers = [threading.Thread(target=_produce, args=(base,)) for base in (0, 1000, 2000)]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()

        received = []
        while True:
            try:
                received.append(channel.try_recv())
            except Empty:
                break
        self.assertEqual(sorted(received), sorted(list(range(100)) + list(range(1000, 1100)) + list(range(2000, 2100))))


if __name__ == "__main__":
    unittest.main()
