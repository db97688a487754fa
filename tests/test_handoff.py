"""Tests for hand-off queue module."""

import pytest
import queue
import threading
import time

from src.dirnotify.handoff import HandoffQueue
from src.dirnotify.exceptions import StreamClosedError


def start_put(stream, item):
    """Run put() on a thread; returns (thread, results list)."""
    results = []
    thread = threading.Thread(target=lambda: results.append(stream.put(item)), daemon=True)
    thread.start()
    return thread, results


class TestHandoffQueue:
    """Tests for HandoffQueue class."""

    def test_put_blocks_until_taken(self):
        stream = HandoffQueue()
        thread, results = start_put(stream, "a")

        thread.join(timeout=0.2)
        assert thread.is_alive()

        assert stream.get(timeout=1.0) == "a"
        thread.join(timeout=1.0)
        assert not thread.is_alive()
        assert results == [True]

    def test_items_delivered_in_order(self):
        stream = HandoffQueue()

        def produce():
            for i in range(5):
                stream.put(i)
            stream.close()

        threading.Thread(target=produce, daemon=True).start()
        assert list(stream) == [0, 1, 2, 3, 4]

    def test_get_timeout(self):
        stream = HandoffQueue()
        with pytest.raises(queue.Empty):
            stream.get(timeout=0.05)

    def test_get_after_close(self):
        stream = HandoffQueue()
        stream.close()
        assert stream.closed
        with pytest.raises(StreamClosedError):
            stream.get(timeout=1.0)

    def test_close_wakes_waiting_consumer(self):
        stream = HandoffQueue()
        errors = []

        def consume():
            try:
                stream.get()
            except StreamClosedError as e:
                errors.append(e)

        thread = threading.Thread(target=consume, daemon=True)
        thread.start()
        time.sleep(0.1)
        stream.close()
        thread.join(timeout=1.0)

        assert not thread.is_alive()
        assert len(errors) == 1

    def test_cancel_releases_blocked_put(self):
        stream = HandoffQueue()
        thread, results = start_put(stream, "a")
        time.sleep(0.1)

        stream.cancel()
        thread.join(timeout=1.0)

        assert not thread.is_alive()
        assert results == [False]
        assert stream.cancelled

    def test_cancel_withdraws_offered_item(self):
        stream = HandoffQueue()
        thread, _ = start_put(stream, "a")
        time.sleep(0.1)
        stream.cancel()
        thread.join(timeout=1.0)

        with pytest.raises(queue.Empty):
            stream.get(timeout=0.1)

    def test_put_after_cancel(self):
        stream = HandoffQueue()
        stream.cancel()
        assert stream.put("a") is False

    def test_put_after_close(self):
        stream = HandoffQueue()
        stream.close()
        assert stream.put("a") is False

    def test_close_and_cancel_idempotent(self):
        stream = HandoffQueue()
        stream.cancel()
        stream.cancel()
        stream.close()
        stream.close()
        assert stream.closed

    def test_multiple_producers(self):
        stream = HandoffQueue()
        threads = [start_put(stream, i)[0] for i in range(3)]

        received = sorted(stream.get(timeout=1.0) for _ in range(3))
        for thread in threads:
            thread.join(timeout=1.0)

        assert received == [0, 1, 2]
