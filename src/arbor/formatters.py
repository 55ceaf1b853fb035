"""
Message and line formatting.

Message formatting applies printf-style arguments to a template; error
description renders a full traceback. Line formatters turn a SinkRecord into
the single line a terminal sink prints:
  - compact:  "{timestamp:%H:%M:%S} {P}/{tag}: {message}"
  - detailed: "{timestamp} [{level_name:>7}] [{thread}] {tag}: {message}"
"""

import traceback
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from arbor.records import SinkRecord


def format_message(template: str, args: tuple[Any, ...]) -> str:
    """
    Apply positional arguments to a printf-style template.

    With no arguments the template is returned verbatim, so a literal `%`
    is never treated as a directive. A single mapping argument enables
    `%(name)s` placeholders.
    """
    if not args:
        return template
    if len(args) == 1 and isinstance(args[0], dict):
        return template % args[0]
    return template % args


def describe_error(exc: BaseException) -> str:
    """Full traceback text for an exception (type, message, stack)."""
    text = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return text.rstrip("\n")


def compose_message(message: str, exc: BaseException | None) -> str:
    """Append the error description on a new line, even to an empty message."""
    if exc is None:
        return message
    return f"{message}\n{describe_error(exc)}"


class LogFormatter(ABC):
    """Base formatter. Transforms SinkRecord → string."""

    @abstractmethod
    def format(self, record: "SinkRecord") -> str: ...


class CompactFormatter(LogFormatter):
    """
    Compact single-line format for terminal display.
    Example: 14:32:05 D/MainActivity: Hello, world!
    """

    def format(self, record: "SinkRecord") -> str:
        ts = record.timestamp.strftime("%H:%M:%S")
        return f"{ts} {record.level_letter}/{record.tag}: {record.message}"


class DetailedFormatter(LogFormatter):
    """
    Detailed format with full timestamp and thread name.
    Example: 2026-02-12 14:32:05.123456 [  DEBUG] [MainThread] MainActivity: Hello
    """

    def format(self, record: "SinkRecord") -> str:
        ts = record.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")
        parts = [f"{ts} [{record.level_name:>7}]"]
        if record.thread_name:
            parts.append(f"[{record.thread_name}]")
        parts.append(f"{record.tag}:")
        parts.append(record.message)
        return " ".join(parts)
