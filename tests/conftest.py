"""Shared test fixtures for fluentpipe."""

import logging

import pytest


@pytest.fixture
def restore_root_logger():
    """Remove handlers added to the root logger during a test."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield root_logger
    for handler in list(root_logger.handlers):
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)
