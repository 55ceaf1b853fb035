"""
arbor: a small logging façade.

Callers log through module-level functions; every planted tree receives the
call. Trees decide where the output goes.

    import arbor
    from arbor import DebugTree

    arbor.plant(DebugTree())
    arbor.debug("Loaded %d rows", 42)
    arbor.tag("Network").warn("Retrying in %ss", 5)
    arbor.error("Upload failed", exc=err)
"""

from typing import Any

from arbor.forest import Forest
from arbor.tree import Tree
from arbor.debug_tree import DebugTree, MAX_LOG_LENGTH, split_message
from arbor.records import Priority, LogCall, SinkRecord, level_name
from arbor.sinks import Sink, LoggingSink, TerminalSink, MemorySink
from arbor.formatters import LogFormatter, CompactFormatter, DetailedFormatter
from arbor.config import ForestConfig, TreeConfig

__all__ = [
    "Forest",
    "Tree",
    "DebugTree",
    "MAX_LOG_LENGTH",
    "split_message",
    "Priority",
    "LogCall",
    "SinkRecord",
    "level_name",
    "Sink",
    "LoggingSink",
    "TerminalSink",
    "MemorySink",
    "LogFormatter",
    "CompactFormatter",
    "DetailedFormatter",
    "ForestConfig",
    "TreeConfig",
    "plant",
    "uproot",
    "uproot_all",
    "forest",
    "tree_count",
    "as_tree",
    "tag",
    "log",
    "verbose",
    "debug",
    "info",
    "warn",
    "warning",
    "error",
    "wtf",
    "critical",
    "configure",
]


# ── Registry ──────────────────────────────────────────────────────────

def plant(*trees: Tree) -> None:
    Forest.instance().plant(*trees)


def uproot(tree: Tree) -> None:
    Forest.instance().uproot(tree)


def uproot_all() -> None:
    Forest.instance().uproot_all()


def forest() -> list[Tree]:
    return Forest.instance().forest()


def tree_count() -> int:
    return Forest.instance().tree_count


def as_tree() -> Tree:
    return Forest.instance().as_tree()


def configure(config: ForestConfig | dict) -> dict[str, Tree]:
    return Forest.instance().configure(config)


# ── Logging ───────────────────────────────────────────────────────────

def tag(explicit_tag: str) -> Tree:
    """Set a one-time tag for the next log call on this thread."""
    return Forest.instance().tag(explicit_tag)


def log(priority: int, message: str | None = None, *args: Any, exc: BaseException | None = None) -> None:
    Forest.instance().log(priority, message, *args, exc=exc)


def verbose(message: str | None = None, *args: Any, exc: BaseException | None = None) -> None:
    Forest.instance().log(Priority.VERBOSE, message, *args, exc=exc)


def debug(message: str | None = None, *args: Any, exc: BaseException | None = None) -> None:
    Forest.instance().log(Priority.DEBUG, message, *args, exc=exc)


def info(message: str | None = None, *args: Any, exc: BaseException | None = None) -> None:
    Forest.instance().log(Priority.INFO, message, *args, exc=exc)


def warn(message: str | None = None, *args: Any, exc: BaseException | None = None) -> None:
    Forest.instance().log(Priority.WARN, message, *args, exc=exc)


def error(message: str | None = None, *args: Any, exc: BaseException | None = None) -> None:
    Forest.instance().log(Priority.ERROR, message, *args, exc=exc)


def wtf(message: str | None = None, *args: Any, exc: BaseException | None = None) -> None:
    """Log at ASSERT priority: a condition that should never happen."""
    Forest.instance().log(Priority.ASSERT, message, *args, exc=exc)


warning = warn
critical = wtf
