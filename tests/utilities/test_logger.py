"""
Tests for structured logging setup.
"""

import logging

import structlog

from utilities.logger import setup_logging


def test_setup_logging_creates_log_file(tmp_path):
    log_file = tmp_path / "logs" / "api.log"
    root = logging.getLogger()
    handlers_before = list(root.handlers)

    try:
        setup_logging(log_level="INFO", log_format="console", log_file=str(log_file))
        assert log_file.exists()
    finally:
        for handler in list(root.handlers):
            if handler not in handlers_before:
                root.removeHandler(handler)
                handler.close()
        structlog.reset_defaults()
