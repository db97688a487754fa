"""Data models for the dirnotify package."""

from dataclasses import dataclass
from enum import Flag, IntEnum
from pathlib import Path
from typing import Optional


class EventOp(IntEnum):
    """Lifecycle operations reported by a notifier."""
    ERROR = 1    # Error while operating
    MAKE = 2     # Make container
    LIST = 3     # List container
    DESTROY = 4  # Destroy container
    UPDATE = 5   # Update element
    DELETE = 6   # Delete element

    @property
    def label(self) -> str:
        """Printable name of the operation."""
        return _OP_LABELS[self]

    def __str__(self) -> str:
        return self.label


_OP_LABELS = {
    EventOp.ERROR: "ERROR",
    EventOp.MAKE: "MAKE",
    EventOp.LIST: "NOTICE",
    EventOp.DESTROY: "DESTROY",
    EventOp.UPDATE: "UPDATE",
    EventOp.DELETE: "DELETE",
}


def format_op(value: int) -> str:
    """
    Render an operation code, tolerating values outside EventOp.

    Args:
        value: Integer operation code

    Returns:
        The operation label, or UNKNOWN(<value>)
    """
    try:
        return EventOp(value).label
    except ValueError:
        return f"UNKNOWN({value})"


# Operations that never carry an element name
_CONTAINER_OPS = frozenset({EventOp.ERROR, EventOp.MAKE, EventOp.DESTROY})


@dataclass(frozen=True)
class NotifyEvent:
    """
    A single container / element event.

    Attributes:
        op: The lifecycle operation
        name: Base name of the affected file (empty for container events
            and for the LIST terminator)
        err: The underlying failure, set iff op is ERROR
    """
    op: EventOp
    name: str = ""
    err: Optional[BaseException] = None

    def __post_init__(self):
        if not isinstance(self.op, EventOp):
            raise ValueError(f"op must be an EventOp: {self.op!r}")
        if (self.op is EventOp.ERROR) != (self.err is not None):
            raise ValueError(f"err must be set iff op is ERROR: {self.op.label}")
        if self.name and self.op in _CONTAINER_OPS:
            raise ValueError(f"{self.op.label} events carry no name: {self.name}")
        if "/" in self.name:
            raise ValueError(f"name must be a base name: {self.name}")

    @classmethod
    def error(cls, err: BaseException) -> "NotifyEvent":
        """Create an ERROR event for the given failure."""
        return cls(EventOp.ERROR, err=err)

    @property
    def is_terminator(self) -> bool:
        """True for the empty-name LIST that closes a listing pass."""
        return self.op is EventOp.LIST and not self.name

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "op": self.op.label,
            "name": self.name,
            "error": str(self.err) if self.err is not None else None,
        }

    def __str__(self) -> str:
        if self.err is not None:
            return f"{self.op.label} {self.err}"
        if self.name:
            return f"{self.op.label} {self.name}"
        return self.op.label


class ChangeOp(Flag):
    """Operation bits carried by a raw watch notification."""
    CREATE = 1
    WRITE = 2
    REMOVE = 4
    RENAME = 8


DELETE_OPS = ChangeOp.REMOVE | ChangeOp.RENAME
UPDATE_OPS = ChangeOp.CREATE | ChangeOp.WRITE


@dataclass
class RawChange:
    """
    Raw notification from the filesystem watch before classification.

    Attributes:
        path: Absolute path affected by the change
        op: Operation bits
        is_directory: Whether the watch reported the entry as a directory
        watch: Path of the watch that reported the change, if known
    """
    path: Path
    op: ChangeOp
    is_directory: bool = False
    watch: Optional[Path] = None
