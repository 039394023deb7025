"""
Tests for logging setup module.
"""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

import pytest

from osrs_prices.core.logging_setup import setup_logging

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def restore_root_logger():
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)


def test_console_only_by_default():
    setup_logging()

    root_logger = logging.getLogger()
    assert len(root_logger.handlers) == 1
    assert root_logger.level == logging.WARNING


def test_debug_level():
    setup_logging(debug=True)

    assert logging.getLogger().level == logging.DEBUG


def test_file_handler_when_log_file_given(tmp_path):
    log_file = tmp_path / "logs" / "osrs_prices.log"

    setup_logging(log_file=log_file)

    root_logger = logging.getLogger()
    assert any(isinstance(h, RotatingFileHandler) for h in root_logger.handlers)
    assert log_file.parent.exists()


def test_can_be_called_multiple_times_safely(tmp_path):
    setup_logging()
    setup_logging(debug=True)

    assert len(logging.getLogger().handlers) == 1


def test_quiets_urllib3():
    setup_logging(debug=False)

    assert logging.getLogger("urllib3").level == logging.WARNING
