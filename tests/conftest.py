"""
Global pytest configuration and fixtures for test isolation.

Cached settings and the ``spanlog`` logging configuration are process-global;
reset them around every test so environment variables and handlers set by one
test cannot leak into the next.
"""

import logging
import os

import pytest

from spanlog.config.settings import get_settings
from spanlog.core.logger import create_logger
from spanlog.sinks import MemorySink


def reset_all_global_state():
    """Reset cached settings and the package logger."""
    get_settings.cache_clear()

    package_logger = logging.getLogger("spanlog")
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def isolate_global_state(monkeypatch):
    """Strip SPANLOG_* variables and reset globals before and after each test."""
    for key in list(os.environ):
        if key.startswith("SPANLOG_"):
            monkeypatch.delenv(key, raising=False)
    reset_all_global_state()
    yield
    reset_all_global_state()


@pytest.fixture
def memory_sink():
    return MemorySink()


@pytest.fixture
def root(memory_sink):
    """A bare root logger writing to ``memory_sink``."""
    return create_logger(sink=memory_sink)
