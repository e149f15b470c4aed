"""
Logging helpers for the training engine.

Usage:
    from tensornet.common.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Training started")

The library only installs a NullHandler, so nothing is emitted until the
application configures logging, either on its own or through setup_logging().
"""

import logging
import sys
from enum import Enum

ROOT_NAME = 'tensornet'

_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'

logging.getLogger(ROOT_NAME).addHandler(logging.NullHandler())


class LogLevel(Enum):
    """Log levels for configuration."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


# Module-level state
_console_handler = None


def setup_logging(level=LogLevel.INFO, console_output=True):
    """
    Attach a console handler to the engine's root logger.

    Calling it again only changes the level.

    Args:
        level (LogLevel): Minimum log level to emit
        console_output (bool): Whether to write records to stdout

    Returns:
        logging.Logger: The engine's root logger
    """
    global _console_handler

    root_logger = logging.getLogger(ROOT_NAME)
    root_logger.setLevel(level.value)

    if console_output and _console_handler is None:
        _console_handler = logging.StreamHandler(sys.stdout)
        _console_handler.setFormatter(logging.Formatter(_FORMAT))
        root_logger.addHandler(_console_handler)
    if _console_handler is not None:
        _console_handler.setLevel(level.value)

    return root_logger


def get_logger(name):
    """
    Get a logger for a module under the engine's namespace.

    Args:
        name (str): Module name (typically __name__)

    Returns:
        logging.Logger: Logger instance
    """
    if name == ROOT_NAME or name.startswith(ROOT_NAME + '.'):
        return logging.getLogger(name)
    return logging.getLogger(f'{ROOT_NAME}.{name}')
