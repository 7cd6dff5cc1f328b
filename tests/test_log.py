"""Tests for logging setup."""

import logging

from sysmon.log import ACTIVITY_LOGGER, setup_activity_log, setup_logging


def test_setup_logging_levels():
    """Test verbose switches the sysmon logger to DEBUG."""
    assert setup_logging(verbose=False).level == logging.WARNING
    logger = setup_logging(verbose=True)
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_activity_log_writes_file(tmp_path):
    """Test activity records are appended to the log file."""
    log_file = tmp_path / "logs" / "activity.log"
    activity = setup_activity_log(log_file)

    activity.info("Top processes listed: %s", "1, 2")
    for handler in activity.handlers:
        handler.flush()

    assert activity.name == ACTIVITY_LOGGER
    assert "[INFO] Top processes listed: 1, 2" in log_file.read_text()
    setup_activity_log(None)


def test_activity_log_without_file():
    """Test the activity logger discards records when no file is set."""
    activity = setup_activity_log(None)

    assert not activity.propagate
    assert all(isinstance(h, logging.NullHandler) for h in activity.handlers)
