"""
carbontrack/core/config.py
==========================
Centralised configuration for CarbonTrack.

Settings are loaded from environment variables, with an optional
``config/.env`` file at the project root.  Every field has a default so the
ledger can be embedded without any configuration; invalid values raise a
``ValidationError`` at startup.

Usage
-----
    from carbontrack.core.config import get_settings
    from carbontrack.ledger import CarbonLedger

    cfg = get_settings()
    ledger = CarbonLedger.from_settings(cfg, owner=wallet_address)

In application code that needs a module-level reference::

    from carbontrack.core.config import settings   # resolved at first access
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Application-wide settings resolved from environment variables.

    Field names are read case-insensitively.
    """

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / "config" / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------
    LEDGER_ID: str = Field(
        default="default",
        min_length=1,
        description="Identifier of the ledger instance, used as a metrics label.",
        examples=["user-0x5fb5"],
    )
    ALLOW_OVER_OFFSET: bool = Field(
        default=True,
        description=(
            "Accept offsets that push a trip's offset above its emissions.  "
            "When false, such offsets are rejected with InvalidAmount."
        ),
    )

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    )
    LOG_JSON: bool = Field(
        default=True,
        description="Render logs as JSON lines; false selects the console renderer.",
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: object) -> str:
        level = str(v).strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got: {v!r}"
            )
        return level

    @property
    def log_level_int(self) -> int:
        """Numeric ``logging`` level for ``LOG_LEVEL``."""
        return logging.getLevelName(self.LOG_LEVEL)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the singleton ``Settings`` instance.

    Cached via ``lru_cache`` so that environment variables are parsed
    only once per process.  In tests, call ``get_settings.cache_clear()``
    before patching environment variables.
    """
    return Settings()


class _LazySettings:
    """Proxy that resolves ``get_settings()`` on first attribute access."""

    _instance: Optional[Settings] = None

    def _resolve(self) -> Settings:
        if self._instance is None:
            self._instance = get_settings()
        return self._instance

    def __getattr__(self, name: str) -> object:
        return getattr(self._resolve(), name)


settings: Settings = _LazySettings()  # type: ignore[assignment]
