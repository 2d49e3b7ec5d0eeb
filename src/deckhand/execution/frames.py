"""Call frames and the LIFO call stack of running tasks."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from deckhand.core.errors import CallStackError
from deckhand.execution.protocols import RollbackAction, TaskLike


@dataclass(eq=False)
class CallFrame:
    """One active invocation of a task.

    ``rollback`` starts empty and is set by the task itself, through
    ``ExecutionEngine.on_rollback``, while this frame is on top of the stack.
    Frames compare by identity: the same task invoked twice gets two frames.
    """

    task: TaskLike
    rollback: RollbackAction | None = None

    def attach_rollback(self, action: RollbackAction) -> None:
        self.rollback = action

    @property
    def has_rollback(self) -> bool:
        return self.rollback is not None


class CallStack:
    """
    The nesting of currently executing tasks.

    The top frame, if any, belongs to the task that is running right now.
    Only the engine pushes and pops; everything else reads.
    """

    def __init__(self) -> None:
        self._frames: list[CallFrame] = []

    def push(self, task: TaskLike) -> CallFrame:
        frame = CallFrame(task)
        self._frames.append(frame)
        return frame

    def pop(self) -> CallFrame:
        if not self._frames:
            raise CallStackError("pop from an empty call stack")
        return self._frames.pop()

    def current(self) -> TaskLike | None:
        return self._frames[-1].task if self._frames else None

    @property
    def top(self) -> CallFrame | None:
        return self._frames[-1] if self._frames else None

    def frames(self) -> tuple[CallFrame, ...]:
        """Snapshot of active frames, bottom first."""
        return tuple(self._frames)

    def __len__(self) -> int:
        return len(self._frames)

    def __bool__(self) -> bool:
        return bool(self._frames)

    def __iter__(self) -> Iterator[CallFrame]:
        return iter(tuple(self._frames))
