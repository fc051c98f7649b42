"""
Structured Logging — Rich console for dev, JSON file for production.

Provides a unified logging setup with colored, timestamped output
via the Rich library and optional JSON-structured file logging.

Usage:
    from promo_shorts.core.logging import setup_logging, get_logger

    setup_logging()
    log = get_logger(__name__)
    log.info("Run started", extra={"subject": "Magic Glow Serum"})
"""

from __future__ import annotations

import logging

from rich.logging import RichHandler

_CONFIGURED = False

JSON_FORMAT = (
    '{"time": "%(asctime)s", "level": "%(levelname)s", '
    '"logger": "%(name)s", "message": "%(message)s"}'
)


def setup_logging(
    level: int = logging.INFO,
    log_file: str | None = None,
    quiet_loggers: tuple[str, ...] = ("urllib3", "asyncio"),
) -> None:
    """Configure application-wide logging.

    Args:
        level: Logging level (default: INFO).
        log_file: Optional path for JSON file logging.
        quiet_loggers: Third-party loggers capped at WARNING.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    root = logging.getLogger()
    root.setLevel(level)

    console_handler = RichHandler(
        rich_tracebacks=True,
        show_time=True,
        show_path=False,
        markup=False,
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler.setLevel(level)
    root.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
        file_handler.setLevel(level)
        root.addHandler(file_handler)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Get a named logger instance."""
    return logging.getLogger(name)
