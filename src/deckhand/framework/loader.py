"""Load a task file: a Python module that builds a Namespace tree.

A task file is ordinary Python. It must expose the root of its task tree
as a module-level ``namespace``::

    from deckhand import Namespace

    namespace = Namespace()

    @namespace.task()
    def deploy(engine):
        engine.transaction(lambda: engine.execute("migrate", namespace))
"""

from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

from deckhand.core.errors import TaskFileError
from deckhand.core.logging import get_logger
from deckhand.framework.namespace import Namespace

logger = get_logger(__name__)

NAMESPACE_VARIABLE = "namespace"
_MODULE_NAME = "_deckhand_task_file"


def load_task_file(path: Path | str, variable: str = NAMESPACE_VARIABLE) -> Namespace:
    """
    Import ``path`` and return its root namespace.

    Raises:
        TaskFileError: The file is missing, raises on import, or does not
            define ``variable`` as a Namespace
    """
    path = Path(path)
    if not path.is_file():
        raise TaskFileError(f"task file not found: {path}")

    spec = importlib.util.spec_from_file_location(_MODULE_NAME, path)
    if spec is None or spec.loader is None:
        raise TaskFileError(f"cannot load module from: {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[_MODULE_NAME] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(_MODULE_NAME, None)
        raise TaskFileError(f"error loading {path}: {e}", cause=e) from e

    namespace = getattr(module, variable, None)
    if not isinstance(namespace, Namespace):
        available = [n for n in dir(module) if not n.startswith("_")]
        raise TaskFileError(
            f"'{variable}' in {path} is not a Namespace. Available: {available}"
        )

    logger.debug("task_file_loaded", path=str(path), tasks=sum(1 for _ in namespace.iter_tasks()))
    return namespace


__all__ = ["load_task_file", "NAMESPACE_VARIABLE"]
