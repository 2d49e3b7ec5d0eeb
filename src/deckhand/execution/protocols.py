"""
Structural protocols between the execution engine and its collaborators.

The engine never imports the namespace registry, a logging backend or a
transport. It depends on shape only:

Architecture:
    ::

        protocols.py
        ├── TaskLike        : what the engine reads from a task
        ├── NamespaceLike   : what the engine reads from a namespace
        ├── EventLogger     : leveled sink for engine events
        └── TaskContext     : what a task body may call back into

    deckhand.framework.namespace provides concrete TaskLike / NamespaceLike
    implementations; a structlog bound logger satisfies EventLogger; the
    ExecutionEngine itself satisfies TaskContext.

Tags:
    protocol, execution, decoupling, deckhand
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

TaskBody = Callable[["TaskContext"], Any]
RollbackAction = Callable[[], Any]


@runtime_checkable
class TaskLike(Protocol):
    """A named unit of work. Read-only to the engine."""

    name: str

    @property
    def body(self) -> TaskBody: ...

    @property
    def fully_qualified_name(self) -> str: ...


@runtime_checkable
class NamespaceLike(Protocol):
    """A node in the task tree; ``parent`` is None at the root."""

    @property
    def parent(self) -> NamespaceLike | None: ...

    @property
    def fully_qualified_name(self) -> str | None: ...

    def lookup(self, name: str) -> TaskLike | None: ...

    def find_namespace(self, name: str) -> NamespaceLike | None: ...


class EventLogger(Protocol):
    """Leveled event sink.

    ``info`` carries transaction events, ``debug`` the dispatch trace,
    ``warning`` the notable rollback events and ``error`` compensation
    failures.
    """

    def debug(self, event: str, **kw: Any) -> Any: ...

    def info(self, event: str, **kw: Any) -> Any: ...

    def warning(self, event: str, **kw: Any) -> Any: ...

    def error(self, event: str, **kw: Any) -> Any: ...


class TaskContext(Protocol):
    """The capabilities a running task body receives as its only argument."""

    @property
    def current_task(self) -> TaskLike | None: ...

    @property
    def in_transaction(self) -> bool: ...

    def execute(self, name: str, namespace: NamespaceLike, fail_silently: bool = False) -> Any: ...

    def transaction(self, body: Callable[[], Any] | None = None) -> Any: ...

    def on_rollback(self, action: RollbackAction) -> None: ...


__all__ = [
    "TaskBody",
    "RollbackAction",
    "TaskLike",
    "NamespaceLike",
    "EventLogger",
    "TaskContext",
]
