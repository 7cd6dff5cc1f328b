"""
Logging configuration for sysmon.

Console diagnostics go to stderr; operator actions go to an optional activity
log file through a dedicated logger that callers pass around explicitly.
"""

import logging
import sys
from pathlib import Path

ACTIVITY_LOGGER = "sysmon.activity"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure the ``sysmon`` logger hierarchy for terminal output.

    Args:
        verbose: Log DEBUG and above instead of WARNING and above.

    Returns:
        The configured ``sysmon`` logger.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger("sysmon")
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(fmt="[%(levelname)s] %(message)s"))
    logger.addHandler(console_handler)
    logger.propagate = False
    return logger


def setup_activity_log(log_file: Path | None) -> logging.Logger:
    """
    Return the activity logger, writing to ``log_file`` when one is given.

    The activity logger does not propagate, so operator actions never reach
    the console.
    """
    logger = logging.getLogger(ACTIVITY_LOGGER)
    logger.setLevel(logging.INFO)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.propagate = False

    if log_file is None:
        logger.addHandler(logging.NullHandler())
        return logger

    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(file_handler)
    return logger
