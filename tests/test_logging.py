"""
Tests for logging configuration module.
"""

import pytest
import logging
from io import StringIO

from specrad.core.logging_config import get_logger, reset_warnings, setup_logging, warn_once


def test_setup_logging_default():
    """Test setting up logging with default parameters."""
    stream = StringIO()
    setup_logging(level="INFO", stream=stream)

    logger = logging.getLogger("specrad.test")
    logger.info("Test message")

    output = stream.getvalue()
    assert "Test message" in output
    assert "INFO" in output


def test_setup_logging_custom_level():
    """Test setting up logging with custom level."""
    stream = StringIO()
    setup_logging(level="WARNING", stream=stream)

    logger = logging.getLogger("specrad.test")
    logger.info("Hidden message")
    logger.warning("Shown message")

    output = stream.getvalue()
    assert "Hidden message" not in output
    assert "Shown message" in output


def test_setup_logging_custom_format():
    """Test setting up logging with custom format."""
    stream = StringIO()
    setup_logging(level="INFO", format_string="%(levelname)s - %(message)s", stream=stream)

    logging.getLogger("specrad.test").info("Test message")

    assert "INFO - Test message" in stream.getvalue()


def test_get_logger():
    """Test getting a logger instance."""
    logger = get_logger("radiation.band")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "specrad.radiation.band"


def test_logger_hierarchy():
    """Library loggers sit below the package logger."""
    child = get_logger("parent.child")
    assert child.name.startswith("specrad.parent")
    assert logging.getLogger("specrad") in [child.parent, child.parent.parent]


def test_warn_once():
    stream = StringIO()
    setup_logging(level="WARNING", format_string="%(message)s", stream=stream)
    logger = get_logger("test.warnings")

    assert warn_once(logger, "edge", "first")
    assert not warn_once(logger, "edge", "second")
    assert warn_once(logger, "other", "third")

    output = stream.getvalue()
    assert "first" in output
    assert "second" not in output
    assert "third" in output


def test_reset_warnings():
    logger = get_logger("test.reset")
    warn_once(logger, "edge", "message")
    reset_warnings()
    assert warn_once(logger, "edge", "message")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
