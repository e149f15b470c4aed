"""
Tests for the logging helpers.
"""

import logging

from tensornet.common import LogLevel, get_logger, setup_logging
from tensornet.common import logger as logger_module


def test_get_logger_namespaces_names():
    assert get_logger('tensornet.neural_networks').name == 'tensornet.neural_networks'
    assert get_logger('my_app').name == 'tensornet.my_app'


def test_setup_logging_is_idempotent(monkeypatch):
    root = logging.getLogger('tensornet')
    monkeypatch.setattr(logger_module, '_console_handler', None)
    handlers_before = list(root.handlers)
    level_before = root.level
    try:
        setup_logging(LogLevel.DEBUG)
        setup_logging(LogLevel.WARNING)
        added = [h for h in root.handlers if h not in handlers_before]
        assert len(added) == 1
        assert root.level == logging.WARNING
        assert added[0].level == logging.WARNING
    finally:
        for handler in root.handlers:
            if handler not in handlers_before:
                root.removeHandler(handler)
        root.setLevel(level_before)
