"""
Logging setup for mint-tune.

Library modules call logging.getLogger(__name__) and attach no handlers.
CLI entry points call setup_logger() once to configure the "mint_tune"
logger; child loggers propagate to it.
"""

import logging
import sys
from pathlib import Path

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _make_handler(handler: logging.Handler, level: int, formatter: logging.Formatter):
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logger(
    name: str = "mint_tune",
    level: int = logging.INFO,
    log_file: Path | None = None,
    format_string: str | None = None,
) -> logging.Logger:
    """
    Configure a logger with a stdout handler and an optional file handler.

    Calling it again replaces the previous handlers.

    Args:
        name: Logger name
        level: Logging level
        log_file: Optional log file (appended to; parent directories created)
        format_string: Record format (default: timestamp, level, message)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt=DATE_FORMAT)
    logger.addHandler(_make_handler(logging.StreamHandler(sys.stdout), level, formatter))

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(_make_handler(logging.FileHandler(log_file, mode="a"), level, formatter))

    return logger


def verbosity_to_level(verbose: int) -> int:
    """Map a CLI -v count to a logging level (0 -> INFO, >=1 -> DEBUG)."""
    return logging.DEBUG if verbose >= 1 else logging.INFO


def log_section(logger: logging.Logger, title: str, width: int = 80, char: str = "="):
    """Log a banner header."""
    rule = char * width
    logger.info(rule)
    logger.info(title)
    logger.info(rule)
