"""
Execution engine - task dispatch with hooks, transactions and rollback.

The engine owns two pieces of mutable state for its whole life:

* a CallStack of the tasks currently running, and
* the transaction registry: ``None`` while no transaction is active, or the
  list of frames that registered a rollback during the active transaction.

Architecture:
    ::

        execute(name, ns)
          ├── lookup name in ns            (TaskNotFoundError unless fail_silently)
          ├── execute("before_<name>")     (silently skipped when absent)
          ├── push frame ─ body(engine) ─ pop frame   (pop on every exit path)
          └── execute("after_<name>")      (skipped when the body raised)

        transaction(body)
          Inactive ── open ──> Active ── body ok ──> commit ──> Inactive
                                  │
                                  └── body raised ──> rollback sweep ──> re-raise ──> Inactive
          Active ── nested open ──> body() inline, same registry

        rollback(frames)
          newest registration first; each compensation runs with its task
          pushed back on the stack; failures are logged and collected,
          never raised.

Threading:
    An engine is driven by one logical thread of control. Independent task
    trees that must run concurrently each get their own engine.

Examples:
    >>> from deckhand import ExecutionEngine, Namespace
    >>> ns = Namespace()
    >>> @ns.task()
    ... def deploy(engine):
    ...     return engine.transaction(lambda: engine.execute("migrate", ns))
    >>> @ns.task()
    ... def migrate(engine):
    ...     engine.on_rollback(lambda: print("undo migrate"))
    ...     return "migrated"
    >>> ExecutionEngine().execute("deploy", ns)
    'migrated'

Tags:
    execution, dispatcher, transaction, rollback, compensation, deckhand
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from deckhand.core.errors import (
    InvalidArgumentError,
    NoActiveTaskError,
    RollbackFailure,
    TaskNotFoundError,
)
from deckhand.core.logging import LogContext, get_logger
from deckhand.execution.frames import CallFrame, CallStack
from deckhand.execution.protocols import EventLogger, NamespaceLike, RollbackAction, TaskLike

BEFORE_HOOK_PREFIX = "before_"
AFTER_HOOK_PREFIX = "after_"
PATH_SEPARATOR = ":"


class ExecutionEngine:
    """
    Runs tasks, their before/after hooks, and transactions around them.

    Task bodies receive the engine as their only argument and may call
    ``execute``, ``transaction`` and ``on_rollback`` on it; while a body runs,
    ``current_task`` is that body's task.
    """

    def __init__(self, logger: EventLogger | None = None) -> None:
        self._stack = CallStack()
        self._rollback_requests: list[CallFrame] | None = None
        self.log = logger if logger is not None else get_logger(__name__)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def current_task(self) -> TaskLike | None:
        """The task currently executing, or None when nothing runs."""
        return self._stack.current()

    @property
    def in_transaction(self) -> bool:
        return self._rollback_requests is not None

    @property
    def call_frames(self) -> tuple[CallFrame, ...]:
        """Active frames, bottom first. A task may inspect this to find its caller."""
        return self._stack.frames()

    @property
    def rollback_requests(self) -> tuple[CallFrame, ...]:
        """Frames registered for rollback in the active transaction (empty when inactive)."""
        return tuple(self._rollback_requests or ())

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def execute(self, name: str, namespace: NamespaceLike, fail_silently: bool = False) -> Any:
        """
        Execute the task ``name`` in ``namespace`` with its before and after hooks.

        Args:
            name: Task name, unqualified
            namespace: Namespace to resolve the name (and the hooks) in
            fail_silently: Return None instead of raising when the task is missing

        Returns:
            Whatever the task body returned.

        Raises:
            TaskNotFoundError: The task does not exist and fail_silently is False
            Exception: Anything raised by a hook or task body, unchanged
        """
        task = namespace.lookup(name)
        if task is None:
            if fail_silently:
                return None
            path = namespace.fully_qualified_name if namespace.parent is not None else None
            raise TaskNotFoundError(name, namespace_path=path)

        self.execute(f"{BEFORE_HOOK_PREFIX}{name}", namespace, fail_silently=True)
        self.log.debug("task.executing", task=task.fully_qualified_name)

        with self._task_frame(task):
            result = task.body(self)

        self.execute(f"{AFTER_HOOK_PREFIX}{name}", namespace, fail_silently=True)
        return result

    def find_and_execute(self, path: str, namespace: NamespaceLike) -> Any:
        """
        Execute a colon-separated task path such as ``deploy:migrate``.

        Intermediate segments name nested namespaces; the last segment is run
        with ``execute`` in the namespace that owns it, so its hooks are looked
        up there as well.

        A missing intermediate namespace raises TaskNotFoundError naming the
        whole path.
        """
        *namespace_names, task_name = path.split(PATH_SEPARATOR)
        if not task_name:
            raise InvalidArgumentError(f"invalid task path {path!r}")

        current = namespace
        for ns_name in namespace_names:
            child = current.find_namespace(ns_name)
            if child is None:
                raise TaskNotFoundError(path)
            current = child

        return self.execute(task_name, current)

    @contextmanager
    def _task_frame(self, task: TaskLike) -> Iterator[CallFrame]:
        frame = self._stack.push(task)
        try:
            with LogContext(task=task.fully_qualified_name):
                yield frame
        finally:
            self._stack.pop()

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def transaction(self, body: Callable[[], Any] | None = None) -> Any:
        """
        Run ``body`` so that a failure anywhere inside rolls back every task
        that registered a compensation since the transaction opened.

        A transaction opened inside another one runs its body inline and
        shares the outer registry.

        Raises:
            InvalidArgumentError: No callable body given
            NoActiveTaskError: Called while no task is executing
            Exception: Whatever the body raised, after the rollback sweep
        """
        if body is None or not callable(body):
            raise InvalidArgumentError("transaction expects a callable body")
        if not self._stack:
            raise NoActiveTaskError("transaction must be called from within a task")

        if self.in_transaction:
            return body()

        self.log.info("transaction.start")
        self._rollback_requests = []
        try:
            result = body()
        except Exception as exc:
            self.log.info("transaction.rollback", error_type=type(exc).__name__)
            self.rollback(self._rollback_requests)
            raise
        else:
            self.log.info("transaction.commit")
            return result
        finally:
            self._rollback_requests = None

    def on_rollback(self, action: RollbackAction) -> None:
        """
        Register ``action`` as the compensation for the currently executing task.

        Calling this again from the same task invocation replaces the action
        without registering the frame twice. Outside a transaction the action
        is kept on the frame but nothing will ever run it.
        """
        frame = self._stack.top
        if frame is None:
            raise NoActiveTaskError("on_rollback must be called from within a task")
        if action is None or not callable(action):
            raise InvalidArgumentError("on_rollback expects a callable action")

        frame.attach_rollback(action)

        if self._rollback_requests is None:
            self.log.debug("rollback.ignored", task=frame.task.fully_qualified_name)
            return
        if frame not in self._rollback_requests:
            self._rollback_requests.append(frame)

    # ------------------------------------------------------------------
    # Rollback sweep
    # ------------------------------------------------------------------

    def rollback(self, frames: Iterable[CallFrame]) -> list[RollbackFailure]:
        """
        Run the compensations of ``frames`` newest first.

        Each compensation runs with its task pushed back on the call stack.
        A compensation that raises is logged and recorded; the sweep carries
        on with the rest.

        Returns:
            The failures collected during the sweep, in the order they happened.
        """
        failures: list[RollbackFailure] = []

        for frame in reversed(tuple(frames)):
            if frame.rollback is None:
                continue
            task_name = frame.task.fully_qualified_name
            with self._task_frame(frame.task):
                self.log.warning("rolling back", task=task_name)
                try:
                    frame.rollback()
                except Exception as exc:
                    failures.append(RollbackFailure(task=task_name, error=exc))
                    self.log.error(
                        "rollback.failed",
                        task=task_name,
                        error_type=type(exc).__name__,
                        error_message=str(exc),
                    )

        return failures


__all__ = [
    "ExecutionEngine",
    "BEFORE_HOOK_PREFIX",
    "AFTER_HOOK_PREFIX",
]
