"""
Structured error types for Deckhand.

Every error the execution core raises on its own behalf extends
DeckhandError, so callers can tell a lookup mistake from a usage mistake
from an internal bookkeeping fault without parsing messages.

Task failures are never wrapped: whatever a task body raises propagates
to the caller unchanged, after the engine has done its stack bookkeeping
and, inside a transaction, its rollback sweep.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                      DeckhandError                        │
        │            (category, context, cause)                     │
        ├──────────────────────────────────────────────────────────┤
        │  LOOKUP                USAGE                INTERNAL      │
        │  TaskNotFoundError     NoActiveTaskError    CallStackError│
        │  DuplicateTaskError    InvalidArgumentError               │
        │                                                           │
        │  TASK                              CONFIG                 │
        │  TaskError (for task authors)      TaskFileError          │
        └──────────────────────────────────────────────────────────┘

        RollbackFailure  (record, never raised)

Examples:
    >>> error = TaskNotFoundError("migrate", namespace_path="deploy")
    >>> str(error)
    "no such task `migrate' in `deploy'"
    >>> error.to_dict()["category"]
    'LOOKUP'

Tags:
    error-handling, exception-hierarchy, deckhand, execution
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and reporting."""

    LOOKUP = "LOOKUP"         # Unknown task or namespace, duplicate names
    USAGE = "USAGE"           # Engine primitives called out of context
    TASK = "TASK"             # Failures raised by task or hook bodies
    ROLLBACK = "ROLLBACK"     # Compensation failures (logged, never raised)
    CONFIG = "CONFIG"         # Task file or settings problems
    INTERNAL = "INTERNAL"     # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        task: Qualified name of the task involved
        namespace: Qualified name of the namespace involved
        metadata: Additional key-value pairs
    """

    task: str | None = None
    namespace: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["task", "namespace"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DeckhandError(Exception):
    """
    Base exception for all Deckhand errors.

    Subclasses set ``default_category``; instances carry a message, a
    category, an ErrorContext and an optional chained cause.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DeckhandError:
        """
        Add context to this error (fluent API).

        Usage:
            raise TaskError("upload failed").with_context(host="web1")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        result = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "context": self.context.to_dict(),
        }
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# LOOKUP ERRORS
# =============================================================================


class TaskNotFoundError(DeckhandError):
    """A task name could not be resolved in the given namespace."""

    default_category = ErrorCategory.LOOKUP

    def __init__(self, task_name: str, namespace_path: str | None = None, **kwargs: Any):
        fqn = f" in `{namespace_path}'" if namespace_path else ""
        super().__init__(f"no such task `{task_name}'{fqn}", **kwargs)
        self.task_name = task_name
        self.namespace_path = namespace_path
        self.context.task = self.context.task or task_name
        self.context.namespace = self.context.namespace or namespace_path


class DuplicateTaskError(DeckhandError, ValueError):
    """A task or namespace name was registered twice in one namespace."""

    default_category = ErrorCategory.LOOKUP


# =============================================================================
# USAGE ERRORS
# =============================================================================


class NoActiveTaskError(DeckhandError):
    """An engine primitive that needs a running task was called with an empty call stack."""

    default_category = ErrorCategory.USAGE


class InvalidArgumentError(DeckhandError, ValueError):
    """An engine primitive was called with a missing or unusable argument."""

    default_category = ErrorCategory.USAGE


# =============================================================================
# TASK / INTERNAL ERRORS
# =============================================================================


class TaskError(DeckhandError):
    """
    Convenience base for failures raised by task bodies.

    Task authors are free to raise any exception; the engine treats them all
    the same way. This class only adds the structured context.
    """

    default_category = ErrorCategory.TASK


class TaskFileError(DeckhandError):
    """A task file is missing, fails to import, or exposes no namespace."""

    default_category = ErrorCategory.CONFIG


class CallStackError(DeckhandError):
    """Call frame bookkeeping went out of balance. Always a bug."""

    default_category = ErrorCategory.INTERNAL


@dataclass(frozen=True)
class RollbackFailure:
    """
    One compensation that raised during a rollback sweep.

    These are collected and logged by the sweep, never re-raised.
    """

    task: str
    error: Exception

    @property
    def error_type(self) -> str:
        return type(self.error).__name__

    def to_dict(self) -> dict[str, Any]:
        return {
            "task": self.task,
            "error_type": self.error_type,
            "error_message": str(self.error),
            "category": ErrorCategory.ROLLBACK.value,
        }


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DeckhandError",
    "TaskNotFoundError",
    "DuplicateTaskError",
    "NoActiveTaskError",
    "InvalidArgumentError",
    "TaskError",
    "TaskFileError",
    "CallStackError",
    "RollbackFailure",
]
