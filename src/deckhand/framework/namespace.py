"""Namespace tree for registering and looking up tasks.

Manifesto:
    Tasks live in a tree of namespaces so that ``deploy:migrate`` and
    ``db:migrate`` can coexist, and so that hooks (``before_migrate``) are
    found next to the task they wrap.

Tags:
    deckhand, framework, registry, namespace, task-discovery

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from deckhand.core.errors import DuplicateTaskError
from deckhand.core.logging import get_logger
from deckhand.execution.protocols import TaskBody

logger = get_logger(__name__)

SEPARATOR = ":"


@dataclass(frozen=True)
class TaskDefinition:
    """A named task body owned by a namespace."""

    name: str
    namespace: Namespace = field(repr=False, compare=False)
    body: TaskBody = field(repr=False, compare=False)
    description: str = ""

    @property
    def fully_qualified_name(self) -> str:
        prefix = self.namespace.fully_qualified_name
        return f"{prefix}{SEPARATOR}{self.name}" if prefix else self.name

    @property
    def brief_description(self) -> str:
        """First line of the description, for listings."""
        return self.description.strip().splitlines()[0] if self.description.strip() else ""


class Namespace:
    """
    A node in the task tree.

    The root namespace has no name and no parent; every other namespace is
    created through ``parent.namespace(name)``.
    """

    def __init__(self, name: str | None = None, parent: Namespace | None = None) -> None:
        if parent is not None and not name:
            raise ValueError("a nested namespace needs a name")
        self.name = name
        self._parent = parent
        self._tasks: dict[str, TaskDefinition] = {}
        self._namespaces: dict[str, Namespace] = {}

    def __repr__(self) -> str:
        return f"Namespace({self.fully_qualified_name or '<root>'!r})"

    @property
    def parent(self) -> Namespace | None:
        return self._parent

    @property
    def fully_qualified_name(self) -> str | None:
        if self._parent is None:
            return None
        prefix = self._parent.fully_qualified_name
        return f"{prefix}{SEPARATOR}{self.name}" if prefix else self.name

    @property
    def tasks(self) -> dict[str, TaskDefinition]:
        return dict(self._tasks)

    @property
    def namespaces(self) -> dict[str, Namespace]:
        return dict(self._namespaces)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def define_task(self, name: str, body: TaskBody, description: str = "") -> TaskDefinition:
        """Register ``body`` under ``name`` in this namespace."""
        if SEPARATOR in name:
            raise ValueError(f"task name may not contain {SEPARATOR!r}: {name!r}")
        if name in self._tasks or name in self._namespaces:
            raise DuplicateTaskError(f"'{name}' is already defined in {self!r}")

        task = TaskDefinition(name=name, namespace=self, body=body, description=description)
        self._tasks[name] = task
        logger.debug("task_registered", task=task.fully_qualified_name)
        return task

    def task(
        self, name: str | None = None, description: str = ""
    ) -> Callable[[TaskBody], TaskBody]:
        """Decorator registering a function as a task.

        The task name defaults to the function name and the description to
        its docstring. The function itself is returned unchanged.
        """

        def decorator(fn: TaskBody) -> TaskBody:
            self.define_task(
                name or fn.__name__,
                fn,
                description=description or (fn.__doc__ or ""),
            )
            return fn

        return decorator

    def namespace(self, name: str) -> Namespace:
        """Return the child namespace ``name``, creating it on first use."""
        if name in self._namespaces:
            return self._namespaces[name]
        if SEPARATOR in name:
            raise ValueError(f"namespace name may not contain {SEPARATOR!r}: {name!r}")
        if name in self._tasks:
            raise DuplicateTaskError(f"'{name}' is already defined as a task in {self!r}")

        child = Namespace(name, parent=self)
        self._namespaces[name] = child
        return child

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup(self, name: str) -> TaskDefinition | None:
        return self._tasks.get(name)

    def find_namespace(self, name: str) -> Namespace | None:
        return self._namespaces.get(name)

    def iter_tasks(self) -> Iterator[TaskDefinition]:
        """All tasks in this subtree, depth first, sorted by name at each level."""
        for name in sorted(self._tasks):
            yield self._tasks[name]
        for name in sorted(self._namespaces):
            yield from self._namespaces[name].iter_tasks()


__all__ = ["Namespace", "TaskDefinition", "SEPARATOR"]
