"""Common notifier interface and constructors."""

from abc import ABC, abstractmethod
from typing import Optional

from .config import NotifierConfig
from .handoff import HandoffQueue


class Notifier(ABC):
    """
    Sends events about a container directory and its elements.

    Events are read from events(). The stream is closed by the notifier
    after close() or when its upstream source ends.
    """

    @abstractmethod
    def events(self) -> HandoffQueue:
        """Return the event stream."""

    @abstractmethod
    def reload(self) -> None:
        """Request a full listing of the container."""

    @abstractmethod
    def close(self) -> None:
        """Shut the notifier down; the event stream is closed eventually."""

    @abstractmethod
    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the processing thread to finish.

        Returns:
            True if the thread has finished
        """

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def new_notifier(path, config: Optional[NotifierConfig] = None) -> Notifier:
    """Create a watch-backed notifier for path."""
    from .dir_notifier import DirNotifier
    return DirNotifier(path, config)


def new_simple_notifier(path, config: Optional[NotifierConfig] = None) -> Notifier:
    """Create a listing-only notifier for path."""
    from .simple_notifier import SimpleDirNotifier
    return SimpleDirNotifier(path, config)


def open_notifier(path=None, config: Optional[NotifierConfig] = None) -> Notifier:
    """
    Create the notifier selected by config.backend.

    Args:
        path: Directory to observe (defaults to config.path)
        config: Notifier configuration
    """
    config = config or NotifierConfig()
    if path is None:
        path = config.path
    if config.backend == "simple":
        return new_simple_notifier(path, config)
    return new_notifier(path, config)
