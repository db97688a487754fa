"""Configuration for the dirnotify package."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from .exceptions import ConfigError


BACKENDS = ("watch", "simple")


@dataclass
class NotifierConfig:
    """
    Configuration options for a notifier.

    Attributes:
        path: Directory to observe
        backend: "watch" for the watchdog-backed notifier, "simple" for
            the listing-only notifier
        observer_timeout: Seconds the watchdog observer waits per poll
        join_timeout: Seconds to wait for the observer thread on shutdown
        reload_interval: Seconds between periodic reloads (None disables)
        log_level: Logging level name for the command line tool
    """
    path: Path = field(default_factory=lambda: Path("."))
    backend: str = "watch"
    observer_timeout: float = 1.0
    join_timeout: float = 5.0
    reload_interval: Optional[float] = None
    log_level: str = "INFO"

    def __post_init__(self):
        if isinstance(self.path, str):
            self.path = Path(self.path)
        if self.backend not in BACKENDS:
            raise ConfigError(f"Unknown backend: {self.backend!r} (expected one of {', '.join(BACKENDS)})")
        if self.observer_timeout <= 0:
            raise ConfigError(f"observer_timeout must be positive: {self.observer_timeout}")
        if self.join_timeout <= 0:
            raise ConfigError(f"join_timeout must be positive: {self.join_timeout}")
        if self.reload_interval is not None and self.reload_interval <= 0:
            raise ConfigError(f"reload_interval must be positive: {self.reload_interval}")
        self.log_level = self.log_level.upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigError(f"Unknown log level: {self.log_level}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "NotifierConfig":
        """
        Build a configuration from DIRNOTIFY_* environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            A validated configuration; unset variables keep their defaults
        """
        env = os.environ if environ is None else environ
        kwargs = {}

        if env.get("DIRNOTIFY_PATH"):
            kwargs["path"] = Path(env["DIRNOTIFY_PATH"])
        if env.get("DIRNOTIFY_BACKEND"):
            kwargs["backend"] = env["DIRNOTIFY_BACKEND"].lower()
        if env.get("DIRNOTIFY_RELOAD_INTERVAL"):
            try:
                kwargs["reload_interval"] = float(env["DIRNOTIFY_RELOAD_INTERVAL"])
            except ValueError:
                raise ConfigError(
                    f"DIRNOTIFY_RELOAD_INTERVAL is not a number: {env['DIRNOTIFY_RELOAD_INTERVAL']!r}"
                )
        if env.get("DIRNOTIFY_LOG_LEVEL"):
            kwargs["log_level"] = env["DIRNOTIFY_LOG_LEVEL"]

        return cls(**kwargs)
