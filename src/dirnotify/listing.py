"""Directory listing passes shared by the notifier implementations."""

import logging
import os
import stat
from pathlib import Path
from typing import Callable, List

from .models import EventOp, NotifyEvent

logger = logging.getLogger(__name__)

# Delivers one event; returns False once the notifier is shutting down
Emit = Callable[[NotifyEvent], bool]


def resolve_path(path) -> Path:
    """
    Make a path absolute without resolving symlinks.

    Raises:
        OSError: If the current working directory is unavailable
    """
    return Path(os.path.abspath(os.fspath(path)))


def is_regular_file(path: Path) -> bool:
    """
    Check if path is a regular file, not following symlinks.

    A failed stat (e.g. the entry vanished) counts as not regular.
    """
    try:
        st = os.lstat(path)
    except OSError:
        return False
    return stat.S_ISREG(st.st_mode)


def read_elements(path: Path) -> List[str]:
    """
    Read the names of the regular files directly inside a directory.

    Args:
        path: Directory to read

    Returns:
        Sorted list of base names

    Raises:
        OSError: If the directory itself cannot be read
    """
    names = []
    with os.scandir(path) as entries:
        for entry in entries:
            try:
                st = entry.stat(follow_symlinks=False)
            except OSError:
                continue
            if stat.S_ISREG(st.st_mode):
                names.append(entry.name)
    names.sort()
    return names


def list_elements(path: Path, emit: Emit) -> bool:
    """
    Run a full listing pass.

    Emits MAKE, one LIST per regular file and a terminating LIST with an
    empty name. A read failure is reported as an ERROR event between MAKE
    and the terminator.

    Args:
        path: Directory to list
        emit: Event sink

    Returns:
        False if the pass was aborted by shutdown
    """
    if not emit(NotifyEvent(EventOp.MAKE)):
        return False

    try:
        names = read_elements(path)
    except OSError as e:
        logger.warning(f"Cannot list {path}: {e}")
        if not emit(NotifyEvent.error(e)):
            return False
        names = []

    for name in names:
        if not emit(NotifyEvent(EventOp.LIST, name)):
            return False

    return emit(NotifyEvent(EventOp.LIST))
