"""Centralized logging configuration using Loguru.

Usage:
    from docgraph.utils.logging import logger
    logger.info("Message")
    logger.debug("Debug message")  # Only shows if DOCGRAPH_LOG_LEVEL=DEBUG

Records always go to stderr: stdout is reserved for command reports, which
must stay parseable under ``--format json``.

Environment Variables:
    DOCGRAPH_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    DOCGRAPH_LOG_JSON: 0|1 (default: 0, human-readable)
"""

import os
import sys
from pathlib import Path

from loguru import logger

from .constants import ENV_LOG_JSON, ENV_LOG_LEVEL

# Remove default handler
logger.remove()

_log_level = os.environ.get(ENV_LOG_LEVEL, "INFO").upper()
_json_mode = os.environ.get(ENV_LOG_JSON, "0") == "1"

# Human-readable format (no emojis - keeps output CP1252-safe)
_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

logger.level("DEBUG", color="<blue>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")

if _json_mode:
    logger.add(sys.stderr, level=_log_level, serialize=True)
else:
    logger.add(
        sys.stderr,
        level=_log_level,
        format=_human_format,
        colorize=None,  # Auto-detect: colors if TTY, plain if piped
    )


def configure_file_logging(log_dir: Path, level: str = "DEBUG") -> int:
    """Add a rotating human-readable file handler under ``log_dir``.

    Returns the loguru handler id so callers can ``logger.remove()`` it.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    return logger.add(
        log_dir / "docgraph.log",
        rotation="10 MB",
        retention="7 days",
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
    )


__all__ = [
    "logger",
    "configure_file_logging",
]
