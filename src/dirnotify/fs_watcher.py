"""File system watch source using the watchdog library."""

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from watchdog.observers import Observer
from watchdog.observers.api import ObservedWatch
from watchdog.events import FileSystemEvent, FileSystemEventHandler

from .config import NotifierConfig
from .exceptions import WatchInitError, WatchRegistrationError
from .models import ChangeOp, RawChange

logger = logging.getLogger(__name__)

# A raw change, an upstream error, or None once the source is closed
SourceItem = Optional[Union[RawChange, BaseException]]


class FSEventHandler(FileSystemEventHandler):
    """Handler that converts watchdog events for one watch to RawChange."""

    def __init__(self, callback: Callable[[SourceItem], None], watch: Path):
        super().__init__()
        self.callback = callback
        self.watch = watch

    def _emit(self, path, op: ChangeOp, is_directory: bool) -> None:
        """Emit a RawChange to the callback."""
        self.callback(RawChange(
            path=Path(os.fsdecode(path)),
            op=op,
            is_directory=is_directory,
            watch=self.watch,
        ))

    def dispatch(self, event: FileSystemEvent) -> None:
        try:
            super().dispatch(event)
        except Exception as e:
            logger.error(f"Failed to translate {event!r}: {e}")
            self.callback(e)

    def on_created(self, event):
        self._emit(event.src_path, ChangeOp.CREATE, event.is_directory)

    def on_deleted(self, event):
        self._emit(event.src_path, ChangeOp.REMOVE, event.is_directory)

    def on_modified(self, event):
        self._emit(event.src_path, ChangeOp.WRITE, event.is_directory)

    def on_moved(self, event):
        # The source side disappears, the destination side appears
        self._emit(event.src_path, ChangeOp.RENAME, event.is_directory)
        self._emit(event.dest_path, ChangeOp.CREATE, event.is_directory)


class WatchSource:
    """
    A single watchdog observer holding non-recursive watches on paths.

    Raw changes and errors are handed to the callback from the observer
    thread; the callback must not block.
    """

    def __init__(
        self,
        callback: Callable[[SourceItem], None],
        config: Optional[NotifierConfig] = None,
    ):
        """
        Initialize and start the observer.

        Args:
            callback: Receives RawChange items, exceptions, and a final None
            config: Notifier configuration

        Raises:
            WatchInitError: If the observer cannot be started
        """
        self.callback = callback
        self.config = config or NotifierConfig()
        self._watches: Dict[Path, ObservedWatch] = {}
        # Reused per path; watchdog keeps the handler of a failed schedule
        self._handlers: Dict[Path, FSEventHandler] = {}
        self._lock = threading.Lock()
        self._closed = False

        try:
            self._observer = Observer(timeout=self.config.observer_timeout)
            self._observer.daemon = True
            self._observer.start()
        except (OSError, RuntimeError) as e:
            raise WatchInitError(f"Cannot start filesystem observer: {e}") from e

    def _forward(self, item: SourceItem) -> None:
        if not self._closed:
            self.callback(item)

    def add(self, path: Path) -> bool:
        """
        Start watching a path (non-recursively).

        Args:
            path: Absolute path of a directory or file

        Returns:
            True if the watch was added, False if already watching

        Raises:
            WatchRegistrationError: If the path cannot be watched
        """
        with self._lock:
            if path in self._watches:
                return False

            try:
                handler = self._handlers.setdefault(path, FSEventHandler(self._forward, path))
                watch = self._observer.schedule(handler, str(path), recursive=False)
            except OSError as e:
                raise WatchRegistrationError(f"Cannot watch {path}: {e}", str(path)) from e

            self._watches[path] = watch
            return True

    def remove(self, path: Path) -> bool:
        """
        Stop watching a path.

        A watch whose target is already gone is dropped quietly.

        Returns:
            True if a watch was dropped, False if not watching
        """
        with self._lock:
            watch = self._watches.pop(path, None)
            if watch is None:
                return False

            try:
                self._observer.unschedule(watch)
            except (KeyError, OSError) as e:
                logger.debug(f"Watch on {path} already released: {e!r}")
            return True

    def close(self) -> None:
        """Stop the observer and signal the end of the source."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._watches.clear()

        self._observer.stop()
        if self._observer.is_alive() and threading.current_thread() is not self._observer:
            self._observer.join(timeout=self.config.join_timeout)
        self.callback(None)
