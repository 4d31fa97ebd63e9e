"""
carbontrack/core/logging_config.py
==================================
structlog bootstrap for applications embedding CarbonTrack.

The library itself only calls ``structlog.get_logger(__name__)``; the host
application decides rendering once at startup::

    from carbontrack.core.config import get_settings
    from carbontrack.core.logging_config import configure_logging

    cfg = get_settings()
    configure_logging(cfg.LOG_LEVEL, json_logs=cfg.LOG_JSON)
"""

from __future__ import annotations

import logging

import structlog

__all__ = ["configure_logging"]


def configure_logging(level: str | int = "INFO", json_logs: bool = True) -> None:
    """Install the structlog processor chain.

    Args:
        level:     Minimum level, name (``"INFO"``) or ``logging`` constant.
        json_logs: JSON lines when True, human-readable console output otherwise.
    """
    if isinstance(level, str):
        name = level.upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name!r}")

    logging.basicConfig(level=level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
