"""
CLI layer for deckhand.

Provides a Typer application that loads a task file and hands task paths
to the execution engine. All execution semantics live in
``deckhand.execution``; this package handles only terminal transport.

Entry point::

    deckhand --help
"""

from deckhand.cli.app import app

__all__ = ["app"]
