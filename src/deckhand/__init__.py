"""
Deckhand - the task-execution core of a deployment tool.

- deckhand.core:       errors, structured logging, settings
- deckhand.framework:  namespace tree and task file loading
- deckhand.execution:  the engine (dispatch, hooks, transactions, rollback)
- deckhand.cli:        the ``deckhand`` command
"""

__version__ = "0.1.0"

from deckhand.core.errors import (  # noqa: E402
    DeckhandError,
    InvalidArgumentError,
    NoActiveTaskError,
    TaskError,
    TaskNotFoundError,
)
from deckhand.execution import CallFrame, ExecutionEngine, TaskContext  # noqa: E402
from deckhand.framework import Namespace, TaskDefinition, load_task_file  # noqa: E402

__all__ = [
    "__version__",
    "ExecutionEngine",
    "CallFrame",
    "TaskContext",
    "Namespace",
    "TaskDefinition",
    "load_task_file",
    "DeckhandError",
    "TaskNotFoundError",
    "NoActiveTaskError",
    "InvalidArgumentError",
    "TaskError",
]
