#!/usr/bin/env python3
"""
Logging configuration for the Scripto client and its scripts.

Logs go to a rotating file and, optionally, the console. Request
parameters that carry credentials or tokens are masked before a record
is written anywhere.

Usage:
    from scripto.logging_config import setup_logging

    logger = setup_logging(name="sync", wiki_id="scripto-wiki")
    logger.info("Starting sync...")
"""

import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from scripto.transport import SECRET_PARAMS

# Matches 'password': 'x' (dict repr) and password=x (query strings)
_SECRET_PATTERN = re.compile(
    r"""(['"]?\b(?:%s)\b['"]?\s*[:=]\s*)(['"]?)([^'"&,}\s]+)""" % "|".join(sorted(SECRET_PARAMS))
)


class SecretFilter(logging.Filter):
    """Mask credential and token values in formatted log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = _SECRET_PATTERN.sub(r"\1\2***", message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def _resolve_level(level: Optional[Union[int, str]]) -> int:
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        return resolved if isinstance(resolved, int) else logging.INFO
    return level


def setup_logging(
    name: str,
    wiki_id: Optional[str] = None,
    log_dir: Optional[str] = None,
    level: Optional[Union[int, str]] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
    console: bool = True,
) -> logging.Logger:
    """
    Set up logging to console and file.

    Args:
        name: Logger name (used in log filename)
        wiki_id: Wiki identifier for log filename (e.g., "scripto-wiki")
        log_dir: Directory for log files (default: ./logs or LOG_DIR env var)
        level: Logging level, number or name (default: LOG_LEVEL env var or INFO)
        max_bytes: Max log file size before rotation
        backup_count: Number of rotated log files to keep
        console: Whether to also log to console

    Returns:
        Configured logger instance

    Log files are named: {wiki_id}-{name}.log (e.g., scripto-wiki-sync.log)
    """
    log_path = Path(log_dir) if log_dir is not None else get_log_dir()
    log_path.mkdir(parents=True, exist_ok=True)

    log_file = log_path / (f"{wiki_id}-{name}.log" if wiki_id else f"{name}.log")
    level = _resolve_level(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear any existing handlers (for re-initialization)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    secrets = SecretFilter()

    handlers = [
        RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    ]
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(secrets)
        logger.addHandler(handler)

    logger.debug(f"Logging initialized: {log_file}")
    return logger


def get_log_dir(default: str = "./logs") -> Path:
    """
    Get the log directory from environment or default.

    Checks LOG_DIR environment variable first.
    """
    return Path(os.environ.get("LOG_DIR", default))
