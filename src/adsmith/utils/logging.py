"""Structured logging setup for adsmith.

Every event is one JSON line. The active site is bound as context, so
lines written while editing a site carry ``site=...`` without each call
passing it.
"""

import os
from pathlib import Path
from typing import Any, Optional

import structlog


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
DEFAULT_LOG_DIR = Path.home() / ".cache" / "adsmith" / "logs"


def _level_from_env() -> str:
    level = os.environ.get("ADSMITH_LOG_LEVEL", "INFO").upper()
    return level if level in LOG_LEVELS else "INFO"


def configure_logging(log_dir: Optional[Path] = None) -> Path:
    """
    Send structlog output to ``<log_dir>/adsmith.log`` as JSON.

    ADSMITH_LOG_LEVEL selects the level (DEBUG, INFO, WARNING, ERROR;
    anything else means INFO):
    - DEBUG: API payloads, selection capture/restore, prompt transitions
    - INFO: user actions (add, reorder, save, link), site switches
    - WARNING: stale responses discarded, stale selections, rejected input
    - ERROR: transport failures

    Args:
        log_dir: Directory for the log file (default ~/.cache/adsmith/logs)

    Returns:
        Path of the log file

    Example:
        ADSMITH_LOG_LEVEL=DEBUG adsmith edit --site a1satta.pro
        tail -f ~/.cache/adsmith/logs/adsmith.log | jq .
    """
    log_dir = log_dir or DEFAULT_LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "adsmith.log"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_from_env()),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=log_file.open("a")),
        cache_logger_on_first_use=True,
    )
    return log_file


def bind_site(site: str) -> None:
    """Attach the active site to every following log event."""
    structlog.contextvars.bind_contextvars(site=site)


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("zone_saved", zone="top", count=3)
    """
    return structlog.get_logger(name)
