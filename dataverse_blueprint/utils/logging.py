"""Logging configuration for the blueprint generator."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

ROOT_LOGGER = 'dataverse_blueprint'


class BlueprintFormatter(logging.Formatter):
    """Single-line formatter with optional ANSI level colours."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
        'RESET': '\033[0m',
    }

    def __init__(self, use_colors: bool = True, include_timestamp: bool = True):
        self.use_colors = use_colors
        self.include_timestamp = include_timestamp
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        parts = []
        if self.include_timestamp:
            stamp = datetime.fromtimestamp(record.created, timezone.utc).strftime('%Y-%m-%d %H:%M:%S')
            parts.append(f"[{stamp}]")

        level = record.levelname
        if self.use_colors:
            parts.append(f"{self.COLORS.get(level, '')}{level:8}{self.COLORS['RESET']}")
        else:
            parts.append(f"{level:8}")

        name = record.name
        if name.startswith(ROOT_LOGGER + '.'):
            name = name[len(ROOT_LOGGER) + 1:]
        parts.append(f"[{name:28}]")
        parts.append(record.getMessage())

        message = ' '.join(parts)
        if record.exc_info:
            message += '\n' + self.formatException(record.exc_info)
        return message


def setup_logging(
    level: int | str = logging.INFO,
    log_file: str | None = None,
    use_colors: bool = True,
) -> logging.Logger:
    """Configure the package logger with a console and optional file handler.

    Safe to call more than once; existing handlers are replaced.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(BlueprintFormatter(use_colors=use_colors and sys.stderr.isatty()))
    logger.addHandler(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(BlueprintFormatter(use_colors=False))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
