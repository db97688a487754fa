#!/usr/bin/env python3
"""
CLI that prints the events of a directory notifier.

Usage:
    dirnotify /path/to/folder
    dirnotify /path/to/folder --backend simple --reload-interval 10
    python -m dirnotify --json
"""

import argparse
import json
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional, TextIO

from dotenv import load_dotenv

from .config import BACKENDS, NotifierConfig
from .exceptions import ConfigError, NotifierError
from .models import NotifyEvent
from .notifier import open_notifier


logger = logging.getLogger("dirnotify.cli")


class GracefulShutdown:
    """Handle graceful shutdown on SIGINT/SIGTERM."""

    def __init__(self, stop_event: threading.Event):
        self.stop_event = stop_event
        signal.signal(signal.SIGINT, self._handler)
        signal.signal(signal.SIGTERM, self._handler)

    def _handler(self, signum, frame):
        logger.info("Received shutdown signal, stopping...")
        self.stop_event.set()


def format_event(event: NotifyEvent, as_json: bool = False) -> str:
    """Render an event as one output line."""
    if as_json:
        return json.dumps(event.to_dict())
    return str(event)


def _print_events(notifier, out: TextIO, as_json: bool, finished: threading.Event) -> None:
    try:
        for event in notifier.events():
            print(format_event(event, as_json), file=out, flush=True)
    finally:
        finished.set()


def run(
    config: NotifierConfig,
    as_json: bool = False,
    stop_event: Optional[threading.Event] = None,
    out: Optional[TextIO] = None,
) -> int:
    """
    Print notifier events until stopped.

    Args:
        config: Notifier configuration (path, backend, reload interval)
        as_json: Print events as JSON objects
        stop_event: Set to stop; the run also ends when the stream ends
        out: Output stream (defaults to stdout)

    Returns:
        Process exit code
    """
    stop_event = stop_event or threading.Event()
    out = out or sys.stdout

    try:
        notifier = open_notifier(config.path, config)
    except NotifierError as e:
        logger.error(f"Cannot observe {config.path}: {e}")
        return 1

    finished = threading.Event()
    printer = threading.Thread(
        target=_print_events,
        args=(notifier, out, as_json, finished),
        name="EventPrinter",
        daemon=True,
    )
    printer.start()

    logger.info(f"Observing {config.path} with the {config.backend} backend")
    with notifier:
        while not stop_event.is_set() and not finished.is_set():
            if stop_event.wait(timeout=config.reload_interval or 0.5):
                break
            if config.reload_interval and not finished.is_set():
                logger.info("Reloading")
                notifier.reload()

    notifier.join(timeout=config.join_timeout)
    printer.join(timeout=config.join_timeout)
    logger.info("Notifier stopped")
    return 0


def build_parser(defaults: NotifierConfig) -> argparse.ArgumentParser:
    """Build the argument parser, defaulting to the given configuration."""
    parser = argparse.ArgumentParser(
        prog="dirnotify",
        description="Print lifecycle events of a directory and its files",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=str(defaults.path),
        help="Directory to observe (default: $DIRNOTIFY_PATH or the current directory)",
    )
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default=defaults.backend,
        help="watch: native filesystem notifications; simple: listings only",
    )
    parser.add_argument(
        "--reload-interval",
        type=float,
        default=defaults.reload_interval,
        help="Seconds between periodic reloads (default: disabled)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print events as JSON objects",
    )
    parser.add_argument(
        "--log-level",
        default=defaults.log_level,
        help="Logging level (default: INFO)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()

    try:
        defaults = NotifierConfig.from_env()
        args = build_parser(defaults).parse_args(argv)
        config = NotifierConfig(
            path=Path(args.path),
            backend=args.backend,
            reload_interval=args.reload_interval,
            log_level=args.log_level,
        )
    except ConfigError as e:
        print(f"dirnotify: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stop_event = threading.Event()
    GracefulShutdown(stop_event)
    return run(config, as_json=args.json, stop_event=stop_event)


if __name__ == "__main__":
    sys.exit(main())
