"""
Deckhand core primitives: errors, logging and settings.

These modules have no knowledge of tasks or the execution engine and can be
imported from anywhere in the package without circular imports.
"""

from deckhand.core.errors import (
    CallStackError,
    DeckhandError,
    DuplicateTaskError,
    ErrorCategory,
    ErrorContext,
    InvalidArgumentError,
    NoActiveTaskError,
    RollbackFailure,
    TaskError,
    TaskFileError,
    TaskNotFoundError,
)
from deckhand.core.logging import (
    LogContext,
    LogLevel,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)

__all__ = [
    # Errors
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
    # Logging
    "LogLevel",
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
