"""
CLI utility helpers for output, logging setup and task file loading.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from deckhand.core.errors import DeckhandError
from deckhand.core.logging import configure_logging
from deckhand.core.settings import get_settings
from deckhand.framework import Namespace, load_task_file

console = Console()
err_console = Console(stderr=True)


# ── Setup helpers ────────────────────────────────────────────────────────


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure structlog from CLI flags, falling back to settings."""
    settings = get_settings()
    if json_logs is None:
        json_logs = settings.log_format == "json"
    configure_logging(
        level=(level or settings.log_level).upper(),
        json_format=json_logs,
        service=settings.service_name,
    )


def load_namespace(task_file: Path | None) -> Namespace:
    """Load the task file, exiting with code 1 on failure."""
    path = task_file or get_settings().task_file
    try:
        return load_task_file(path)
    except DeckhandError as e:
        print_error(e)
        raise typer.Exit(code=1) from e


# ── Output helpers ───────────────────────────────────────────────────────


def print_error(error: BaseException) -> None:
    """Print an error with its class name, the way a failed run surfaces it."""
    label = type(error).__name__
    err_console.print(f"[bold red]Error[/bold red] ({label}): {error}")


def print_task_table(namespace: Namespace, *, title: str = "Tasks") -> None:
    """Render every task in the tree as a Rich table."""
    tasks = list(namespace.iter_tasks())
    if not tasks:
        console.print("[dim]No tasks.[/dim]")
        return

    table = Table(title=title or None, show_lines=False, pad_edge=False)
    table.add_column("task", style="cyan", overflow="fold")
    table.add_column("description", overflow="fold")
    for task in tasks:
        table.add_row(task.fully_qualified_name, task.brief_description)
    console.print(table)
