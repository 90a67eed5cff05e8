"""Tests for logging configuration."""

import logging

from scanmycarbs.app_logging import LOGGER_NAME, configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert logger.propagate is False


def test_configure_logging_applies_level() -> None:
    logger = logging.getLogger(LOGGER_NAME)

    configure_logging("debug")
    debug_level = logger.level
    configure_logging()

    assert debug_level == logging.DEBUG
    assert logger.level == logging.INFO
