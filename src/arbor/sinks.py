"""
Sinks: the platform write primitive behind a DebugTree.

A sink receives one already-chunked segment per call. It performs no
chunking or tag resolution of its own.

Shipped sinks:
  - LoggingSink:  forwards to the stdlib logging hierarchy (default)
  - TerminalSink: writes coloured lines to stdout/stderr
  - MemorySink:   bounded in-memory ring, for inspection and tests
"""

import logging
import sys
import threading
from abc import ABC, abstractmethod
from collections import deque

from arbor.records import Priority, SinkRecord
from arbor.formatters import LogFormatter, CompactFormatter


class Sink(ABC):
    """Base sink. Accepts (priority, tag, message) segments."""

    @abstractmethod
    def write(self, priority: int, tag: str, message: str) -> None:
        """Persist or display one segment."""
        ...

    def flush(self) -> None:
        """Flush any buffered output. Override in buffered sinks."""
        pass

    def close(self) -> None:
        """Cleanup. Override if the sink holds resources."""
        self.flush()


class LoggingSink(Sink):
    """
    Writes each segment to `logging.getLogger(f"{logger_prefix}.{tag}")`.

    The tag becomes the last component of the logger name, so applications
    can configure levels and handlers per tag with the usual logging tools.
    """

    def __init__(self, logger_prefix: str = "arbor"):
        self.logger_prefix = logger_prefix

    def logger_for(self, tag: str) -> logging.Logger:
        name = f"{self.logger_prefix}.{tag}" if self.logger_prefix else tag
        return logging.getLogger(name)

    def write(self, priority: int, tag: str, message: str) -> None:
        level = Priority.at_or_below(int(priority)).to_logging_level()
        self.logger_for(tag).log(level, message)


class TerminalSink(Sink):
    """
    Writes to stdout/stderr with ANSI color coding.
    ERROR+ goes to stderr, everything else to stdout.
    """

    COLORS = {
        Priority.VERBOSE: "\033[90m",   # gray
        Priority.DEBUG: "\033[36m",     # cyan
        Priority.INFO: "\033[37m",      # white/default
        Priority.WARN: "\033[33m",      # yellow
        Priority.ERROR: "\033[31m",     # red
        Priority.ASSERT: "\033[1;91m",  # bold bright red
    }
    RESET = "\033[0m"

    def __init__(self, color: bool = True, formatter: LogFormatter | None = None):
        self.color = color
        self.formatter = formatter or CompactFormatter()

    def write(self, priority: int, tag: str, message: str) -> None:
        formatted = self.formatter.format(SinkRecord.create(priority, tag, message))
        if self.color:
            formatted = f"{self._get_color(priority)}{formatted}{self.RESET}"
        stream = sys.stderr if priority >= Priority.ERROR else sys.stdout
        print(formatted, file=stream, flush=True)

    def _get_color(self, priority: int) -> str:
        """Get ANSI color for a priority, falling back to nearest lower one."""
        for threshold in sorted(self.COLORS, reverse=True):
            if priority >= threshold:
                return self.COLORS[threshold]
        return ""


class MemorySink(Sink):
    """Ring buffer of the last N segments. Does not grow unbounded."""

    def __init__(self, capacity: int = 10000):
        self._buffer: deque[SinkRecord] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def write(self, priority: int, tag: str, message: str) -> None:
        with self._lock:
            self._buffer.append(SinkRecord.create(priority, tag, message))

    def get_recent(self, n: int = 100, tag: str | None = None) -> list[SinkRecord]:
        """Get the most recent segments, optionally only those with `tag`."""
        with self._lock:
            records = list(self._buffer)

        if tag is not None:
            records = [r for r in records if r.tag == tag]

        return records[-n:] if n > 0 else []

    @property
    def records(self) -> list[SinkRecord]:
        with self._lock:
            return list(self._buffer)

    @property
    def messages(self) -> list[str]:
        return [r.message for r in self.records]

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()

    @property
    def count(self) -> int:
        return len(self._buffer)

    @property
    def capacity(self) -> int | None:
        return self._buffer.maxlen
