"""
Centralized settings for Deckhand.

One validated, cached settings object read from ``DECKHAND_*`` environment
variables and an optional ``.env`` file. The CLI consults it for logging
configuration and the default task file; library code never reads the
environment directly.

Examples:
    >>> from deckhand.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.log_level
    'INFO'

Tags:
    configuration, settings, pydantic, environment, deckhand
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from deckhand.core.logging import LogLevel


class DeckhandSettings(BaseSettings):
    """Settings shared by the CLI and logging setup.

    Fields
    ──────
    log_level    : Structlog log level
    log_format   : ``console`` for development, ``json`` for aggregation
    service_name : Value of the ``service.name`` log field
    task_file    : Task file loaded by ``deckhand run`` / ``deckhand tasks``
    """

    model_config = SettingsConfigDict(
        env_prefix="DECKHAND_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    service_name: str = "deckhand"

    # ── Task loading ─────────────────────────────────────────────
    task_file: Path = Field(
        default=Path("Deckfile.py"),
        description="Python module exposing a module-level `namespace`",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        names = [level.value for level in LogLevel]
        if value.upper() not in names:
            raise ValueError(f"log_level must be one of {', '.join(names)}, got {value!r}")
        return value.upper()


@lru_cache(maxsize=1)
def get_settings() -> DeckhandSettings:
    """Load and cache settings. Call ``get_settings.cache_clear()`` to reload."""
    return DeckhandSettings()


__all__ = ["DeckhandSettings", "get_settings"]
