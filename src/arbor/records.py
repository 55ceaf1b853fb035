"""
Priorities and per-call records.

Priorities use the platform log constants (VERBOSE=2 .. ASSERT=7) so that
numeric values written by a sink match what the system log would show.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import IntEnum
from functools import cached_property

from arbor.formatters import format_message


class Priority(IntEnum):
    """Ordered log severity."""
    VERBOSE = 2
    DEBUG = 3
    INFO = 4
    WARN = 5
    ERROR = 6
    ASSERT = 7

    @classmethod
    def from_name(cls, name: str) -> "Priority":
        """Resolve priority from string name, case-insensitive."""
        name_upper = name.upper()
        name_upper = _ALIASES.get(name_upper, name_upper)
        try:
            return cls[name_upper]
        except KeyError:
            raise ValueError(
                f"Unknown priority '{name}'. "
                f"Valid priorities: {', '.join(m.name for m in cls)}"
            )

    @classmethod
    def from_value(cls, value: int | str) -> "Priority":
        """Resolve priority from int or string."""
        if isinstance(value, str):
            return cls.from_name(value)
        if isinstance(value, int):
            for member in cls:
                if member.value == value:
                    return member
            raise ValueError(
                f"No priority with value {value}. "
                f"Valid values: {', '.join(f'{m.name}={m.value}' for m in cls)}"
            )
        raise TypeError(f"Expected int or str, got {type(value).__name__}")

    @classmethod
    def at_or_below(cls, value: int) -> "Priority":
        """Highest priority not above `value`. Values below every priority map to the lowest."""
        for member in reversed(cls):
            if value >= member:
                return member
        return cls.VERBOSE

    @property
    def short(self) -> str:
        """Single-letter form used in terminal output (V, D, I, W, E, A)."""
        return self.name[0]

    def to_logging_level(self) -> int:
        """Equivalent level in the stdlib logging module."""
        return _LOGGING_LEVELS[self]


_ALIASES = {
    "WARNING": "WARN",
    "CRITICAL": "ASSERT",
    "WTF": "ASSERT",
}

_LOGGING_LEVELS = {
    Priority.VERBOSE: 5,
    Priority.DEBUG: logging.DEBUG,
    Priority.INFO: logging.INFO,
    Priority.WARN: logging.WARNING,
    Priority.ERROR: logging.ERROR,
    Priority.ASSERT: logging.CRITICAL,
}

# Map for display: priority int → name string
LEVEL_NAMES: dict[int, str] = {member.value: member.name for member in Priority}


def level_name(level: int) -> str:
    """Get display name for a priority value. Falls back to numeric string."""
    return LEVEL_NAMES.get(level, str(level))


@dataclass(frozen=True)
class LogCall:
    """
    One logging call as seen by every planted tree.

    `tag` is the explicit tag consumed for this call, or None when the tree
    should derive its own. The formatted `message` is computed on first
    access and shared by all trees receiving the call.
    """
    priority: int
    template: str | None
    args: tuple = ()
    exc: BaseException | None = None
    tag: str | None = None

    @property
    def is_empty(self) -> bool:
        """No message and no error: nothing to deliver."""
        return self.template is None and self.exc is None

    @cached_property
    def message(self) -> str:
        if self.template is None:
            return ""
        return format_message(self.template, self.args)


@dataclass(frozen=True)
class SinkRecord:
    """A single segment as written by a line-rendering sink."""
    timestamp: datetime
    priority: int
    level_name: str
    tag: str
    message: str
    thread_name: str = ""

    @property
    def level_letter(self) -> str:
        """Single-letter priority (V, D, I, W, E, A); the number itself when unknown."""
        if self.priority in LEVEL_NAMES:
            return Priority(self.priority).short
        return str(self.priority)

    @classmethod
    def create(cls, priority: int, tag: str, message: str) -> "SinkRecord":
        """Factory method with auto-timestamp and level name resolution."""
        return cls(
            timestamp=datetime.now(timezone.utc),
            priority=priority,
            level_name=level_name(priority),
            tag=tag,
            message=message,
            thread_name=threading.current_thread().name,
        )
