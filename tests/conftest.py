"""
Shared pytest fixtures and configuration for deckhand tests.

This module provides:
- A recording logger that captures engine events in order
- A fresh ExecutionEngine wired to that logger
- A root Namespace and a helper for writing task files
- Settings cache and log-context cleanup for test isolation
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any

import pytest
import structlog

from deckhand.core.logging import clear_context
from deckhand.core.settings import get_settings
from deckhand.execution import ExecutionEngine
from deckhand.framework import Namespace


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "cli" in test_path.parts:
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Logging
# =============================================================================


class RecordingLogger:
    """Captures ``(level, event, fields)`` tuples in call order."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict[str, Any]]] = []

    def _record(self, level: str, event: str, **kw: Any) -> None:
        self.records.append((level, event, kw))

    def debug(self, event: str, **kw: Any) -> None:
        self._record("debug", event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._record("info", event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._record("warning", event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._record("error", event, **kw)

    def events(self, level: str | None = None) -> list[str]:
        return [event for lvl, event, _ in self.records if level is None or lvl == level]

    def find(self, event: str) -> list[dict[str, Any]]:
        return [fields for _, ev, fields in self.records if ev == event]


@pytest.fixture
def recorder() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def engine(recorder: RecordingLogger) -> ExecutionEngine:
    """A fresh engine logging into ``recorder``."""
    return ExecutionEngine(logger=recorder)


@pytest.fixture
def root() -> Namespace:
    """An empty root namespace."""
    return Namespace()


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_state(monkeypatch: pytest.MonkeyPatch):
    """Reset cached settings, DECKHAND_* env vars, log context and structlog config."""
    for var in ("DECKHAND_LOG_LEVEL", "DECKHAND_LOG_FORMAT", "DECKHAND_SERVICE_NAME", "DECKHAND_TASK_FILE"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    clear_context()
    yield
    get_settings.cache_clear()
    clear_context()
    structlog.reset_defaults()


# =============================================================================
# Task files
# =============================================================================


@pytest.fixture
def write_task_file(tmp_path: Path):
    """Write dedented Python source to ``tmp_path/Deckfile.py`` and return the path."""

    def _write(source: str, name: str = "Deckfile.py") -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(source))
        return path

    return _write
