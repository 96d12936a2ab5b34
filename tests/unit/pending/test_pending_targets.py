"""Tests for the pending-target queue and the shell event channel."""

from __future__ import annotations

import threading
import unittest

from mudkip.events import EventChannel
from mudkip.pending import PendingOpenTargets
from mudkip.targets import OpenTargetPayload


def _target(name: str) -> OpenTargetPayload:
    return OpenTargetPayload(target_type="file", path=f"/docs/{name}.md")


class PendingOpenTargetsTests(unittest.TestCase):
    def test_pop_returns_oldest_unpopped_push(self) -> None:
        queue = PendingOpenTargets()
        first, second, third = _target("first"), _target("second"), _target("third")

        queue.push(first)
        queue.push(second)
        popped = [queue.pop()]
        queue.push(third)
        popped.append(queue.pop())
        popped.append(queue.pop())

        self.assertEqual(popped, [first, second, third])
        self.assertIsNone(queue.pop())

    def test_empty_queue_pops_none(self) -> None:
        queue = PendingOpenTargets()
        self.assertIsNone(queue.pop())
        self.assertEqual(len(queue), 0)

    def test_concurrent_pushes_are_all_kept(self) -> None:
        queue = PendingOpenTargets()

        def push_many(prefix: str) -> None:
            for idx in range(200):
                queue.push(_target(f"{prefix}{idx}"))

        threads = [threading.Thread(target=push_many, args=(prefix,)) for prefix in "abcd"]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(queue), 800)
        per_writer: dict[str, list[int]] = {}
        while (item := queue.pop()) is not None:
            name = item.path.rsplit("/", 1)[1][:-3]
            per_writer.setdefault(name[0], []).append(int(name[1:]))
        for indices in per_writer.values():
            self.assertEqual(indices, list(range(200)))


class EventChannelTests(unittest.TestCase):
    def test_events_are_delivered_in_publish_order(self) -> None:
        channel = EventChannel()
        channel.publish("a", 1)
        channel.publish("b", 2)

        self.assertEqual([(event.name, event.payload) for event in channel.drain()], [("a", 1), ("b", 2)])
        self.assertEqual(channel.drain(), [])

    def test_close_wakes_readers_and_drops_later_publishes(self) -> None:
        channel = EventChannel()
        channel.publish("before", None)
        channel.close()

        self.assertFalse(channel.publish("after", None))
        self.assertEqual(channel.get(timeout=1.0).name, "before")
        self.assertIsNone(channel.get(timeout=1.0))
        self.assertIsNone(channel.get(timeout=1.0))
        self.assertTrue(channel.closed)

    def test_get_times_out_with_none(self) -> None:
        self.assertIsNone(EventChannel().get(timeout=0.01))


if __name__ == "__main__":
    unittest.main()
