"""
Deckhand Framework - the task tree the execution engine runs against.

This module provides:
- Namespace: hierarchical task registration and lookup
- TaskDefinition: a named task body with its qualified name
- load_task_file: import a task file and return its root namespace
"""

from deckhand.framework.loader import load_task_file
from deckhand.framework.namespace import Namespace, TaskDefinition

__all__ = [
    "Namespace",
    "TaskDefinition",
    "load_task_file",
]
