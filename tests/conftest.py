"""
Shared pytest fixtures.
"""

import logging

import pytest
import structlog


@pytest.fixture(autouse=True)
def restore_logging():
    """setup_logging replaces the root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()
