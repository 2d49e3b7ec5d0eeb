"""
Root Typer application for the deckhand CLI.
"""

from __future__ import annotations

from pathlib import Path

import typer
from typer import Typer

from deckhand.cli.utils import console, load_namespace, print_error, print_task_table, setup_logging
from deckhand.core.logging import LogLevel
from deckhand.execution import ExecutionEngine

app = Typer(
    name="deckhand",
    help="deckhand: run deployment tasks with hooks and transactional rollback.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("deckhand")
        except PackageNotFoundError:
            from deckhand import __version__ as v
        typer.echo(f"deckhand {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """deckhand CLI: list and run tasks from a task file."""


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("tasks")
def list_tasks(
    task_file: Path | None = typer.Option(None, "--file", "-f", help="Task file (default: DECKHAND_TASK_FILE or Deckfile.py)"),
) -> None:
    """List every task defined in the task file."""
    setup_logging()
    namespace = load_namespace(task_file)
    print_task_table(namespace)


@app.command("run")
def run_tasks(
    tasks: list[str] = typer.Argument(..., help="Task paths to run in order, e.g. deploy:migrate"),
    task_file: Path | None = typer.Option(None, "--file", "-f", help="Task file (default: DECKHAND_TASK_FILE or Deckfile.py)"),
    log_level: LogLevel | None = typer.Option(None, "--log-level", "-l", case_sensitive=False, help="Log level"),
    json_logs: bool | None = typer.Option(None, "--json-logs/--console-logs", help="Log format"),
) -> None:
    """Run tasks in order on one engine; stop at the first failure."""
    setup_logging(log_level, json_logs)
    namespace = load_namespace(task_file)
    engine = ExecutionEngine()

    for path in tasks:
        try:
            engine.find_and_execute(path, namespace)
        except Exception as e:
            print_error(e)
            raise typer.Exit(code=1) from e

    console.print(f"[green]✓[/green] {len(tasks)} task(s) completed")
