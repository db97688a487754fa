"""Notifier backed by a native filesystem watch."""

import logging
import queue
import threading
from typing import Callable, Optional

from .config import NotifierConfig
from .exceptions import PathResolutionError, WatchRegistrationError
from .fs_watcher import SourceItem, WatchSource
from .handoff import HandoffQueue
from .listing import is_regular_file, list_elements, resolve_path
from .models import DELETE_OPS, UPDATE_OPS, ChangeOp, EventOp, NotifyEvent, RawChange
from .notifier import Notifier

logger = logging.getLogger(__name__)

# Inbox markers posted by the notifier itself
_RELOAD = object()
_STOP = object()

SourceFactory = Callable[[Callable[[SourceItem], None], NotifierConfig], WatchSource]


class DirNotifier(Notifier):
    """
    Watch-backed directory notifier.

    The parent directory is watched so that the container can be seen
    appearing; the container itself is watched while it exists. Every
    (re)appearance of the container triggers a full listing pass, element
    changes in between are reported as UPDATE and DELETE.
    """

    def __init__(
        self,
        path,
        config: Optional[NotifierConfig] = None,
        source_factory: SourceFactory = WatchSource,
    ):
        """
        Initialize the notifier and start its processing thread.

        Args:
            path: Directory to observe; it need not exist yet
            config: Notifier configuration
            source_factory: Builds the watch source from a callback and config

        Raises:
            PathResolutionError: If the path cannot be made absolute
            WatchInitError: If the watch subsystem cannot be started
            WatchRegistrationError: If the parent directory cannot be watched
        """
        self.config = config or NotifierConfig()
        try:
            self.path = resolve_path(path)
        except OSError as e:
            raise PathResolutionError(f"Cannot make {path} absolute: {e}") from e
        self.dir = self.path.parent

        self._inbox: "queue.Queue[object]" = queue.Queue()
        self._events = HandoffQueue()
        self._done = threading.Event()
        self._present = False

        self._source = source_factory(self._inbox.put, self.config)
        try:
            self._source.add(self.dir)
        except WatchRegistrationError:
            self._source.close()
            raise
        try:
            self._source.add(self.path)
        except WatchRegistrationError as e:
            # Container may not exist yet; the parent watch reports its creation
            logger.debug(f"Container not watchable yet: {e}")

        self._thread = threading.Thread(
            target=self._read_events,
            name=f"DirNotifier[{self.path.name}]",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Watching {self.path}")

    def events(self) -> HandoffQueue:
        return self._events

    def reload(self) -> None:
        """Request a listing pass; returns immediately."""
        self._inbox.put(_RELOAD)

    def close(self) -> None:
        """Signal shutdown; safe to call more than once."""
        self._done.set()
        self._events.cancel()
        self._inbox.put(_STOP)

    def join(self, timeout: Optional[float] = None) -> bool:
        self._thread.join(timeout)
        return not self._thread.is_alive()

    @property
    def is_closed(self) -> bool:
        """Check if close() has been called."""
        return self._done.is_set()

    def _emit(self, event: NotifyEvent) -> bool:
        """Deliver an event, giving up on shutdown."""
        if self._done.is_set():
            return False
        if event.op is EventOp.ERROR:
            logger.warning(f"{self.path}: {event.err}")
        else:
            logger.debug(f"{self.path}: {event}")
        return self._events.put(event)

    def _read_events(self) -> None:
        """Processing loop run on the notifier thread."""
        try:
            if not self._list_elements():
                return
            while self._read_event():
                pass
        except Exception:
            logger.exception(f"Notifier for {self.path} failed")
        finally:
            self._source.close()
            self._events.close()
            logger.info(f"Stopped watching {self.path}")

    def _read_event(self) -> bool:
        if self._done.is_set():
            return False

        item = self._inbox.get()
        if self._done.is_set() or item is _STOP:
            return False
        if item is None:
            logger.debug(f"Watch source for {self.path} closed")
            return False
        if item is _RELOAD:
            return self._list_elements()
        if isinstance(item, BaseException):
            return self._emit(NotifyEvent.error(item))
        return self._process_change(item)

    def _list_elements(self) -> bool:
        self._present = True
        return list_elements(self.path, self._emit)

    def _process_change(self, change: RawChange) -> bool:
        if change.path == self.path:
            return self._process_dir_change(change)
        if change.path.parent == self.path:
            return self._process_file_change(change)
        logger.debug(f"Ignoring change outside {self.path}: {change.path}")
        return True

    def _process_dir_change(self, change: RawChange) -> bool:
        # The parent watch reports appearance and disappearance in order; the
        # container's own watch may deliver its removal late, after a re-creation
        if change.watch is not None and change.watch != self.dir:
            return True

        if change.op & DELETE_OPS:
            self._source.remove(self.path)
            if not self._present:
                return True
            self._present = False
            logger.info(f"Container {self.path} destroyed")
            return self._emit(NotifyEvent(EventOp.DESTROY))

        if change.op & ChangeOp.CREATE:
            logger.info(f"Container {self.path} created")
            try:
                self._source.add(self.path)
            except WatchRegistrationError as e:
                if not self._emit(NotifyEvent.error(e)):
                    return False
            return self._list_elements()

        return True

    def _process_file_change(self, change: RawChange) -> bool:
        # Element reports from the old container watch may trail its DESTROY
        if not self._present:
            return True
        name = change.path.name

        if change.op & DELETE_OPS:
            if change.is_directory:
                return True
            return self._emit(NotifyEvent(EventOp.DELETE, name))

        if change.op & UPDATE_OPS:
            if not is_regular_file(change.path):
                return True
            return self._emit(NotifyEvent(EventOp.UPDATE, name))

        return True
