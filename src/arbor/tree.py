"""
Tree: the interface every log destination implements.

One required method, `emit`, receives a fully resolved call. Everything else
is an independently overridable hook:
  - is_loggable(priority, tag): per-priority gating (default: always)
  - accept(call): gate + emit, called by the forest for every planted tree

The per-level convenience methods make a tree usable on its own, without a
forest. Used that way there is no explicit tag slot: trees derive their tags.
"""

from abc import ABC, abstractmethod
from typing import Any

from arbor.records import LogCall, Priority


class Tree(ABC):
    """Base destination. Receives log calls from the forest."""

    def is_loggable(self, priority: int, tag: str | None) -> bool:
        """Return False to skip a call. `tag` is the explicit tag, if any."""
        return True

    @abstractmethod
    def emit(
        self,
        priority: int,
        tag: str | None,
        message: str,
        exc: BaseException | None,
    ) -> None:
        """
        Write one log call.

        `tag` is the explicit tag for this call or None; `message` already has
        its arguments applied and is "" when only an error was supplied.
        """
        ...

    def accept(self, call: LogCall) -> None:
        """Deliver a call if this tree wants it. Called by the forest."""
        if not self.is_loggable(call.priority, call.tag):
            return
        self.emit(call.priority, call.tag, call.message, call.exc)

    # ── Logging entry points ──────────────────────────────────────

    def log(
        self,
        priority: int,
        message: str | None = None,
        *args: Any,
        exc: BaseException | None = None,
    ) -> None:
        """Log at `priority`. A call with neither message nor error is a no-op."""
        call = LogCall(priority=priority, template=message, args=args, exc=exc)
        if call.is_empty:
            return
        self.accept(call)

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
        """Log at ASSERT priority: a condition that should never happen."""
        self.log(Priority.ASSERT, message, *args, exc=exc)

    # Aliases matching the stdlib logging vocabulary
    warning = warn
    critical = wtf

    def flush(self) -> None:
        """Flush buffered output. Override in trees that buffer."""
        pass

    def close(self) -> None:
        """Release resources. Override if the tree holds any."""
        self.flush()
