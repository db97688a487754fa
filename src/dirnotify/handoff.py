"""Synchronous hand-off queue used for notifier event streams."""

import queue
import threading
import time
from typing import Any, Iterator, Optional

from .exceptions import StreamClosedError


_EMPTY = object()


class HandoffQueue:
    """
    Zero-capacity queue: put() blocks until a consumer has taken the item.

    There is no buffer, so a producer that outpaces its consumer is held
    back instead of accumulating items in memory.

    - close() is called by the producer once it has nothing more to send.
      Consumers then get StreamClosedError.
    - cancel() is called on shutdown. Blocked and future put() calls
      return False and an item offered but not yet taken is withdrawn.
      Consumers keep waiting until the producer closes the queue.

    Both operations are idempotent and never block on a consumer.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._item: Any = _EMPTY
        self._offered = 0
        self._taken = 0
        self._closed = False
        self._cancelled = False

    def put(self, item: Any) -> bool:
        """
        Hand an item to a consumer, waiting until it is taken.

        Args:
            item: Item to deliver

        Returns:
            True once a consumer took the item, False if the queue was
            cancelled or closed before that happened
        """
        with self._cond:
            while self._item is not _EMPTY and not self._stopped():
                self._cond.wait()
            if self._stopped():
                return False

            self._item = item
            self._offered += 1
            ticket = self._offered
            self._cond.notify_all()

            while self._taken < ticket and not self._stopped():
                self._cond.wait()
            if self._taken < ticket:
                self._item = _EMPTY
                self._cond.notify_all()
                return False
            return True

    def get(self, timeout: Optional[float] = None) -> Any:
        """
        Take the next item.

        Args:
            timeout: Seconds to wait, None to wait forever

        Returns:
            The item handed over by the producer

        Raises:
            StreamClosedError: If the queue has been closed
            queue.Empty: If the timeout expired
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        with self._cond:
            while True:
                if self._closed:
                    raise StreamClosedError("Stream is closed")
                if self._item is not _EMPTY and not self._cancelled:
                    item = self._item
                    self._item = _EMPTY
                    self._taken += 1
                    self._cond.notify_all()
                    return item
                if deadline is None:
                    self._cond.wait()
                else:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise queue.Empty
                    self._cond.wait(remaining)

    def close(self) -> None:
        """Mark the end of the stream."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def cancel(self) -> None:
        """Abort pending and future puts."""
        with self._cond:
            self._cancelled = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        """Check if the stream has ended."""
        with self._cond:
            return self._closed

    @property
    def cancelled(self) -> bool:
        """Check if puts have been aborted."""
        with self._cond:
            return self._cancelled

    def _stopped(self) -> bool:
        return self._closed or self._cancelled

    def __iter__(self) -> Iterator[Any]:
        while True:
            try:
                yield self.get()
            except StreamClosedError:
                return
