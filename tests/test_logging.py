"""Tests for logging setup."""

import logging

import pytest

from mdpair.logging_config import setup_logging


@pytest.fixture
def package_logger():
    """Restore the package logger after each test."""
    logger = logging.getLogger("mdpair")
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers = handlers
    logger.setLevel(level)


class TestSetupLogging:
    """Test the package logger configuration."""

    def test_console_handler(self, package_logger):
        """Test a single console handler at the requested level."""
        logger = setup_logging(level=logging.DEBUG)

        assert logger is package_logger
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_repeated_calls_do_not_duplicate(self, package_logger):
        """Test calling twice replaces the handlers."""
        setup_logging()
        logger = setup_logging()

        assert len(logger.handlers) == 1

    def test_log_file_with_rank(self, package_logger, tmp_path):
        """Test records reach the file tagged with the worker rank."""
        log_file = tmp_path / "run.log"
        logger = setup_logging(log_file=str(log_file), rank=3)

        logging.getLogger("mdpair.engine").info("step done")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        text = log_file.read_text()
        assert "[rank 3] mdpair.engine - INFO - step done" in text
