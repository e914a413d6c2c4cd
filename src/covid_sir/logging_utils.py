"""Logging helpers for projection scripts.

Provides one console + file logging setup so every run leaves a log next to
its artifacts without repeating handler boilerplate in each script.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: str) -> int:
    """Map a string level to a logging level constant."""
    return getattr(logging, str(level).upper(), logging.INFO)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    console: bool = True,
) -> logging.Logger:
    """Configure root logging with optional file and console handlers."""
    logger = logging.getLogger()
    resolved_level = _resolve_level(level)

    # Drop handlers from a previous call so reruns in one process don't duplicate lines.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(resolved_level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = []
    if console:
        handlers.append(logging.StreamHandler())
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(resolved_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
