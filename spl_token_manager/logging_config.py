"""Logging configuration for the SPL token manager.

Every module logs under the ``spl_token_manager`` logger hierarchy. Log
records go to stderr so that command output on stdout stays clean.
"""

import logging
from typing import Optional

PACKAGE_LOGGER = "spl_token_manager"

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# HTTP and event loop internals only log warnings and above
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def level_from_name(name: Optional[str]) -> int:
    """Numeric level for a level name, INFO for anything unrecognised."""
    level = logging.getLevelName((name or "").upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(log_level: str = "INFO", log_format: Optional[str] = None) -> None:
    """Configure logging for a command line run.

    Args:
        log_level: Level name for the package loggers
        log_format: Optional format string for the stderr handler
    """
    level = level_from_name(log_level)
    # No-op when the host application already set up the root logger
    logging.basicConfig(format=log_format or DEFAULT_LOG_FORMAT)

    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, nested under the package logger if it is not already."""
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger,
                     level: str,
                     message: str,
                     **context) -> None:
    """Log ``message`` followed by ``[key=value, ...]`` for each context item.

    Args:
        logger: Logger instance
        level: Level name (debug, info, warning, error, critical)
        message: Log message
        context: Values to append to the message
    """
    log = getattr(logger, level.lower(), logger.info)
    if not context:
        log(message)
        return
    details = ", ".join(f"{key}={value!r}" for key, value in context.items())
    log(f"{message} [{details}]")
