"""
Directory Notifier Package

Observes a single directory and produces a normalized stream of lifecycle
events for the directory and the regular files directly inside it.

Features:
- Container events: MAKE, DESTROY, and full listings (LIST ... terminator)
- Element events: UPDATE, DELETE
- Survives the directory disappearing and reappearing
- Watch-backed (watchdog) and listing-only variants
- Back-pressured event stream with prompt shutdown
"""

from .models import (
    EventOp,
    NotifyEvent,
    ChangeOp,
    RawChange,
    format_op,
)

from .config import NotifierConfig

from .exceptions import (
    NotifierError,
    PathResolutionError,
    WatchError,
    WatchInitError,
    WatchRegistrationError,
    StreamClosedError,
    ConfigError,
)

from .handoff import HandoffQueue
from .fs_watcher import WatchSource, FSEventHandler
from .notifier import (
    Notifier,
    new_notifier,
    new_simple_notifier,
    open_notifier,
)
from .dir_notifier import DirNotifier
from .simple_notifier import SimpleDirNotifier


__all__ = [
    # Models
    "EventOp",
    "NotifyEvent",
    "ChangeOp",
    "RawChange",
    "format_op",
    # Config
    "NotifierConfig",
    # Exceptions
    "NotifierError",
    "PathResolutionError",
    "WatchError",
    "WatchInitError",
    "WatchRegistrationError",
    "StreamClosedError",
    "ConfigError",
    # Components
    "HandoffQueue",
    "WatchSource",
    "FSEventHandler",
    # Notifiers
    "Notifier",
    "DirNotifier",
    "SimpleDirNotifier",
    "new_notifier",
    "new_simple_notifier",
    "open_notifier",
]

__version__ = "0.1.0"
