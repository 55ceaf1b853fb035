"""
Forest: the process-wide dispatcher.

One registry of planted trees, shared by every thread. Each log call takes a
snapshot of the registry and hands the same LogCall to every tree in plant
order. A thread-local slot carries an explicit tag to the next call made on
that thread only.

Trees are referenced, not owned: uprooting or resetting never closes them.
"""

import sys
import threading
import traceback
from typing import Any

from arbor.config import ForestConfig, TreeConfig
from arbor.debug_tree import DebugTree
from arbor.formatters import CompactFormatter, DetailedFormatter, LogFormatter
from arbor.records import LogCall, Priority, level_name
from arbor.sinks import LoggingSink, MemorySink, Sink, TerminalSink
from arbor.tree import Tree


class _ExplicitTagSlot(threading.local):
    """Single-use tag for the next log call on the current thread."""

    tag: str | None = None

    def set(self, tag: str | None) -> None:
        self.tag = tag

    def consume(self) -> str | None:
        tag, self.tag = self.tag, None
        return tag


class _ForestTree(Tree):
    """The composite view: a Tree that logs to every tree planted in a forest."""

    def __init__(self, forest: "Forest"):
        self._forest = forest

    def __repr__(self) -> str:
        return f"<ForestTree of {self._forest!r}>"

    def log(
        self,
        priority: int,
        message: str | None = None,
        *args: Any,
        exc: BaseException | None = None,
    ) -> None:
        self._forest.log(priority, message, *args, exc=exc)

    def accept(self, call: LogCall) -> None:
        self._forest.deliver(call)

    def emit(
        self,
        priority: int,
        tag: str | None,
        message: str,
        exc: BaseException | None,
    ) -> None:
        self._forest.deliver(LogCall(priority=priority, template=message, exc=exc, tag=tag))


class Forest:
    """
    Singleton tree registry and log dispatcher.

    Usage:
        forest = Forest.instance()
        forest.plant(DebugTree())
        forest.info("Loaded %d rows", 42)
        forest.tag("Network").warn("Retrying")
    """

    _instance: "Forest | None" = None
    _lock = threading.Lock()

    # Re-export priorities for convenience: Forest.DEBUG, etc.
    VERBOSE = Priority.VERBOSE
    DEBUG = Priority.DEBUG
    INFO = Priority.INFO
    WARN = Priority.WARN
    ERROR = Priority.ERROR
    ASSERT = Priority.ASSERT

    def __init__(self, isolate_tree_errors: bool = True) -> None:
        self.isolate_tree_errors = isolate_tree_errors
        self._trees: tuple[Tree, ...] = ()
        self._trees_lock = threading.Lock()
        self._explicit_tag = _ExplicitTagSlot()
        self._as_tree = _ForestTree(self)
        self._failures = 0
        self._configured: dict[str, Tree] = {}

    @classmethod
    def instance(cls) -> "Forest":
        """Get or create the singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """
        Reset singleton. For testing only, not for production use.
        Planted trees are dropped, not closed.
        """
        with cls._lock:
            if cls._instance is not None:
                cls._instance.uproot_all()
                cls._instance = None

    # ── Registry ──────────────────────────────────────────────────

    def plant(self, *trees: Tree) -> None:
        """Add trees. All are validated before any is planted."""
        for tree in trees:
            if tree is None:
                raise TypeError("tree is None")
            if tree is self._as_tree:
                raise ValueError("Cannot plant the forest into itself.")
            if not isinstance(tree, Tree):
                raise TypeError(f"Expected a Tree, got {type(tree).__name__}")
        with self._trees_lock:
            self._trees = self._trees + trees

    def uproot(self, tree: Tree) -> None:
        """Remove the first planted entry of `tree`."""
        with self._trees_lock:
            for index, planted in enumerate(self._trees):
                if planted is tree:
                    self._trees = self._trees[:index] + self._trees[index + 1:]
                    return
        raise ValueError(f"Cannot uproot tree which is not planted: {tree!r}")

    def uproot_all(self) -> None:
        with self._trees_lock:
            self._trees = ()
            self._configured.clear()

    def forest(self) -> list[Tree]:
        """Snapshot of the planted trees, in plant order."""
        with self._trees_lock:
            return list(self._trees)

    @property
    def tree_count(self) -> int:
        with self._trees_lock:
            return len(self._trees)

    def as_tree(self) -> Tree:
        """A Tree that dispatches to every planted tree. Cannot be planted here."""
        return self._as_tree

    # ── Tags ──────────────────────────────────────────────────────

    def tag(self, tag: str) -> Tree:
        """Use `tag` for the next log call on this thread only."""
        self._explicit_tag.set(tag)
        return self._as_tree

    # ── Core Logging ──────────────────────────────────────────────

    def log(
        self,
        priority: int,
        message: str | None = None,
        *args: Any,
        exc: BaseException | None = None,
    ) -> None:
        """
        Core logging method.

        Consumes this thread's explicit tag, even when the call turns out to
        be a no-op (no message and no error).
        """
        call = LogCall(
            priority=priority,
            template=message,
            args=args,
            exc=exc,
            tag=self._explicit_tag.consume(),
        )
        if call.is_empty:
            return
        self.deliver(call)

    def deliver(self, call: LogCall) -> None:
        """Hand `call` to a snapshot of the planted trees, in plant order."""
        with self._trees_lock:
            trees = self._trees

        for tree in trees:
            try:
                tree.accept(call)
            except Exception as error:
                if not self.isolate_tree_errors:
                    raise
                self.handle_error(tree, error)

    def handle_error(self, tree: Tree, error: Exception) -> None:
        """
        Report a tree that raised during dispatch. Remaining trees still
        receive the call. Override to report elsewhere.
        """
        with self._trees_lock:
            self._failures += 1
        if sys.stderr is None:
            return
        try:
            sys.stderr.write(f"--- Logging error in {tree!r} ---\n")
            traceback.print_exception(type(error), error, error.__traceback__, file=sys.stderr)
        except (OSError, ValueError):
            # stderr closed or detached
            pass

    @property
    def failures(self) -> int:
        """Number of tree failures reported since creation."""
        return self._failures

    # ── Convenience Methods ───────────────────────────────────────

    def verbose(self, message: str | None = None, *args: Any, exc: BaseException | None = None) -> None:
        self.log(Priority.VERBOSE, message, *args, exc=exc)

    def debug(self, message: str | None = None, *args: Any, exc: BaseException | None = None) -> None:
        self.log(Priority.DEBUG, message, *args, exc=exc)

    def info(self, message: str | None = None, *args: Any, exc: BaseException | None = None) -> None:
        self.log(Priority.INFO, message, *args, exc=exc)

    def warn(self, message: str | None = None, *args: Any, exc: BaseException | None = None) -> None:
        self.log(Priority.WARN, message, *args, exc=exc)

    def error(self, message: str | None = None, *args: Any, exc: BaseException | None = None) -> None:
        self.log(Priority.ERROR, message, *args, exc=exc)

    def wtf(self, message: str | None = None, *args: Any, exc: BaseException | None = None) -> None:
        self.log(Priority.ASSERT, message, *args, exc=exc)

    warning = warn
    critical = wtf

    # ── Configuration ─────────────────────────────────────────────

    def configure(self, config: ForestConfig | dict) -> dict[str, Tree]:
        """
        Plant the trees described by `config` (a ForestConfig or its dict form).

        Expected structure:
            isolate_tree_errors: true
            trees:
                console: {type: debug, sink: terminal, color: false, min_priority: INFO}
                app:     {type: debug, sink: logging, logger_prefix: myapp}

        A tree configured under a name used by an earlier call replaces the
        tree planted then. Returns the planted trees by name.
        """
        if not isinstance(config, ForestConfig):
            config = ForestConfig.from_dict(config)

        self.isolate_tree_errors = config.isolate_tree_errors
        trees = {name: _build_tree(tree_cfg) for name, tree_cfg in config.trees.items()}
        with self._trees_lock:
            replaced = [self._configured[name] for name in trees if name in self._configured]
            self._trees = tuple(
                tree for tree in self._trees if not any(tree is old for old in replaced)
            ) + tuple(trees.values())
            self._configured.update(trees)
        return trees

    def configure_defaults(self) -> Tree:
        """
        Plant a sensible default for development: a DebugTree writing
        coloured lines to the terminal.
        """
        tree = DebugTree(sink=TerminalSink(color=True))
        self.plant(tree)
        return tree

    # ── Status ────────────────────────────────────────────────────

    def status(self) -> dict:
        """Current forest state for display."""
        return {
            "tree_count": self.tree_count,
            "trees": [_describe_tree(tree) for tree in self.forest()],
            "isolate_tree_errors": self.isolate_tree_errors,
            "failures": self._failures,
        }

    # ── Cleanup ───────────────────────────────────────────────────

    def flush(self) -> None:
        """Flush all planted trees."""
        for tree in self.forest():
            tree.flush()

    def close(self) -> None:
        """Close all planted trees. Call during shutdown."""
        for tree in self.forest():
            tree.close()


# ── Helpers ───────────────────────────────────────────────────────────

def _describe_tree(tree: Tree) -> dict:
    info: dict[str, Any] = {"type": type(tree).__name__}
    if isinstance(tree, DebugTree):
        info["sink"] = type(tree.sink).__name__
        info["max_chunk_length"] = tree.max_chunk_length
        if tree.min_priority is not None:
            info["min_priority"] = tree.min_priority.value
            info["min_priority_name"] = level_name(tree.min_priority)
    return info


def _build_formatter(name: str | None) -> LogFormatter | None:
    if name is None or name == "compact":
        return CompactFormatter()
    if name == "detailed":
        return DetailedFormatter()
    raise ValueError(f"Unknown formatter '{name}'")


def _build_sink(cfg: TreeConfig) -> Sink:
    """Build a sink from a tree's config."""
    if cfg.sink == "logging":
        return LoggingSink(logger_prefix=cfg.logger_prefix if cfg.logger_prefix is not None else "arbor")
    elif cfg.sink == "terminal":
        return TerminalSink(
            color=cfg.color if cfg.color is not None else True,
            formatter=_build_formatter(cfg.formatter),
        )
    elif cfg.sink == "memory":
        return MemorySink(capacity=cfg.capacity or 10000)
    else:
        raise ValueError(f"Unknown sink type '{cfg.sink}'")


def _build_tree(cfg: TreeConfig) -> Tree:
    """Build a tree from config."""
    if cfg.type == "debug":
        return DebugTree(
            sink=_build_sink(cfg),
            max_chunk_length=cfg.max_chunk_length,
            max_tag_length=cfg.max_tag_length,
            min_priority=cfg.min_priority,
        )
    raise ValueError(f"Unknown tree type '{cfg.type}'")
