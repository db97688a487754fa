"""Notifier that only lists the container on request."""

import logging
import threading
from typing import Optional

from .config import NotifierConfig
from .exceptions import PathResolutionError, StreamClosedError
from .handoff import HandoffQueue
from .listing import list_elements, resolve_path
from .models import EventOp, NotifyEvent
from .notifier import Notifier

logger = logging.getLogger(__name__)


class SimpleDirNotifier(Notifier):
    """
    Listing-only directory notifier.

    Lists the container once at start and again for every reload(). It has
    no incremental source, so it only emits MAKE, LIST and ERROR.
    """

    def __init__(self, path, config: Optional[NotifierConfig] = None):
        """
        Initialize the notifier and start its processing thread.

        Args:
            path: Directory to list
            config: Notifier configuration

        Raises:
            PathResolutionError: If the path cannot be made absolute
        """
        self.config = config or NotifierConfig()
        try:
            self.path = resolve_path(path)
        except OSError as e:
            raise PathResolutionError(f"Cannot make {path} absolute: {e}") from e

        self._events = HandoffQueue()
        self._reload = HandoffQueue()
        self._done = threading.Event()

        self._thread = threading.Thread(
            target=self._read_events,
            name=f"SimpleDirNotifier[{self.path.name}]",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Listing {self.path} on request")

    def events(self) -> HandoffQueue:
        return self._events

    def reload(self) -> None:
        """
        Request a listing pass.

        Blocks until the processing thread accepts the request. Does
        nothing once the notifier is closed.
        """
        self._reload.put(True)

    def close(self) -> None:
        """Signal shutdown; safe to call more than once."""
        self._done.set()
        self._events.cancel()
        self._reload.close()

    def join(self, timeout: Optional[float] = None) -> bool:
        self._thread.join(timeout)
        return not self._thread.is_alive()

    @property
    def is_closed(self) -> bool:
        """Check if close() has been called."""
        return self._done.is_set()

    def _emit(self, event: NotifyEvent) -> bool:
        if self._done.is_set():
            return False
        if event.op is EventOp.ERROR:
            logger.warning(f"{self.path}: {event.err}")
        else:
            logger.debug(f"{self.path}: {event}")
        return self._events.put(event)

    def _read_events(self) -> None:
        try:
            if not list_elements(self.path, self._emit):
                return
            while not self._done.is_set():
                try:
                    self._reload.get()
                except StreamClosedError:
                    return
                if not list_elements(self.path, self._emit):
                    return
        except Exception:
            logger.exception(f"Notifier for {self.path} failed")
        finally:
            self._events.close()
            logger.info(f"Stopped listing {self.path}")
