"""Logging helpers"""

import logging
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

ROOT_LOGGER = 'usbdrive'
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
LOG_FORMATS = ['text', 'json']


def get_logger(name: str) -> logging.Logger:
    """Get a module logger"""
    return logging.getLogger(name)


def setup_logging(level: str = 'ERROR', log_format: str = 'text',
                  stream: Optional[object] = None) -> logging.Logger:
    """
    Configure the package logger.

    Kernel attribute writes are logged at INFO, so the default ERROR level
    keeps normal runs quiet and -v shows every step.

    Args:
        level: Log level name
        log_format: 'text' or 'json'
        stream: Output stream (default: stderr)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(ROOT_LOGGER)

    handler = logging.StreamHandler(stream or sys.stderr)
    if log_format == 'json':
        handler.setFormatter(JsonFormatter(DEFAULT_LOG_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))

    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.ERROR))

    return logger
