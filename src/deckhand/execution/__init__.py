"""
Deckhand execution core.

- ``frames``     CallFrame / CallStack
- ``engine``     ExecutionEngine (dispatch, transactions, rollback)
- ``protocols``  shapes the engine expects from its collaborators
"""

from deckhand.execution.engine import AFTER_HOOK_PREFIX, BEFORE_HOOK_PREFIX, ExecutionEngine
from deckhand.execution.frames import CallFrame, CallStack
from deckhand.execution.protocols import (
    EventLogger,
    NamespaceLike,
    RollbackAction,
    TaskBody,
    TaskContext,
    TaskLike,
)

__all__ = [
    "ExecutionEngine",
    "BEFORE_HOOK_PREFIX",
    "AFTER_HOOK_PREFIX",
    "CallFrame",
    "CallStack",
    "EventLogger",
    "NamespaceLike",
    "RollbackAction",
    "TaskBody",
    "TaskContext",
    "TaskLike",
]
