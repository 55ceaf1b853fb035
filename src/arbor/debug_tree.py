"""
DebugTree: the default destination.

Resolves a tag for every call (explicit tag, else the calling class), appends
the error traceback, and splits long output into segments the platform log
accepts before handing each one to its sink.
"""

import inspect
import threading
from types import FrameType

from arbor.formatters import compose_message
from arbor.records import Priority
from arbor.sinks import Sink, LoggingSink
from arbor.tree import Tree

# Longest message the platform log accepts in a single write.
MAX_LOG_LENGTH = 4000

NEWLINE = "\n"

# Tag used when no frame outside this package can be found.
FALLBACK_TAG = "arbor"

# Frames from these modules belong to dispatch and are skipped when deriving
# a tag. Must cover every module on the path from a façade call to derive_tag.
_PACKAGE = __name__.partition(".")[0]

# A nested scope in a code object's qualified name, e.g. "Outer.run.<locals>.inner".
_LOCAL_SCOPE = ".<locals>."

# Tree methods that run while a call is being dispatched.
_DISPATCH_HOOKS = frozenset({
    "accept", "emit", "is_loggable", "create_tag", "next_tag", "derive_tag",
    "log_message", "log", "verbose", "debug", "info", "warn", "error", "wtf",
})


def split_message(message: str, max_length: int = MAX_LOG_LENGTH) -> list[str]:
    """
    Split a message into segments no longer than `max_length`.

    A message that fits is returned whole, newlines included. Otherwise it is
    split into lines and every line longer than `max_length` is cut into
    consecutive slices of exactly `max_length` characters (the last slice may
    be shorter). Empty inner lines are kept; a trailing newline is not.
    """
    if max_length <= 0:
        raise ValueError(f"max_length must be positive, got {max_length}")
    if len(message) <= max_length:
        return [message]

    lines = message.split(NEWLINE)
    if lines[-1] == "":
        lines.pop()

    segments: list[str] = []
    for line in lines:
        if len(line) <= max_length:
            segments.append(line)
            continue
        for start in range(0, len(line), max_length):
            segments.append(line[start:start + max_length])
    return segments


def _is_internal(frame: FrameType) -> bool:
    module = frame.f_globals.get("__name__", "")
    if module == _PACKAGE or module.startswith(_PACKAGE + "."):
        return True
    # Overridden hooks of Tree subclasses run inside dispatch too
    if frame.f_code.co_name not in _DISPATCH_HOOKS:
        return False
    return isinstance(frame.f_locals.get("self"), Tree)


def _tag_for_frame(frame: FrameType) -> str:
    """Simple name of the class the frame's code was defined in, else its module."""
    code = frame.f_code
    outer = code.co_qualname.split(_LOCAL_SCOPE, 1)[0]
    owner = outer.rpartition(".")[0]
    if owner:
        return owner.rpartition(".")[2]
    module = frame.f_globals.get("__name__") or FALLBACK_TAG
    return module.rpartition(".")[2]


class DebugTree(Tree):
    """
    Writes every call to a sink, tagged with the caller's class name.

    Usage:
        arbor.plant(DebugTree())
        arbor.debug("Loaded %d rows", 42)        # tag: calling class
        arbor.tag("Network").info("Connected")   # tag: "Network"

    Override points:
        create_tag()   choose the tag; may call next_tag() to see the explicit one
        log_message()  write one segment (default: the sink)
    """

    def __init__(
        self,
        sink: Sink | None = None,
        max_chunk_length: int = MAX_LOG_LENGTH,
        max_tag_length: int | None = None,
        min_priority: int | str | None = None,
    ):
        if max_chunk_length <= 0:
            raise ValueError(f"max_chunk_length must be positive, got {max_chunk_length}")
        self.sink = sink if sink is not None else LoggingSink()
        self.max_chunk_length = max_chunk_length
        self.max_tag_length = max_tag_length
        self.min_priority = (
            Priority.from_value(min_priority) if min_priority is not None else None
        )
        self._local = threading.local()
        self._emit_lock = threading.RLock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(sink={type(self.sink).__name__})"

    # ── Gating ────────────────────────────────────────────────────

    def is_loggable(self, priority: int, tag: str | None) -> bool:
        return self.min_priority is None or priority >= self.min_priority

    # ── Tags ──────────────────────────────────────────────────────

    def next_tag(self) -> str | None:
        """Explicit tag of the call being emitted on this thread, if any. Does not consume it."""
        return getattr(self._local, "next_tag", None)

    def create_tag(self) -> str:
        """Tag for the current call: the explicit tag, else a derived one."""
        tag = self.next_tag()
        if tag is not None:
            return tag
        return self.derive_tag()

    def derive_tag(self) -> str:
        """Name of the first calling class outside the logging machinery."""
        frame = inspect.currentframe()
        try:
            while frame is not None and _is_internal(frame):
                frame = frame.f_back
            tag = _tag_for_frame(frame) if frame is not None else FALLBACK_TAG
        finally:
            del frame
        if self.max_tag_length is not None and len(tag) > self.max_tag_length:
            tag = tag[:self.max_tag_length]
        return tag

    # ── Emission ──────────────────────────────────────────────────

    def emit(
        self,
        priority: int,
        tag: str | None,
        message: str,
        exc: BaseException | None,
    ) -> None:
        self._local.next_tag = tag
        try:
            resolved_tag = self.create_tag()
        finally:
            self._local.next_tag = None

        composed = compose_message(message, exc)
        with self._emit_lock:
            for segment in split_message(composed, self.max_chunk_length):
                self.log_message(priority, resolved_tag, segment)

    def log_message(self, priority: int, tag: str, message: str) -> None:
        """Write one segment. Override to redirect output."""
        self.sink.write(priority, tag, message)

    def flush(self) -> None:
        self.sink.flush()

    def close(self) -> None:
        self.sink.close()
