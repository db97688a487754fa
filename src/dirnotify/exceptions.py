"""Custom exceptions for the dirnotify package."""


class NotifierError(Exception):
    """Base exception for all notifier errors."""
    pass


class PathResolutionError(NotifierError):
    """The watched path cannot be made absolute."""
    pass


class WatchError(NotifierError):
    """Error related to the underlying filesystem watch."""
    pass


class WatchInitError(WatchError):
    """The watch subsystem could not be initialized."""
    pass


class WatchRegistrationError(WatchError):
    """A watch could not be registered on a path."""

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class StreamClosedError(NotifierError):
    """The event stream is closed and drained."""
    pass


class ConfigError(NotifierError):
    """Invalid notifier configuration."""
    pass
