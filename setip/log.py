# This file is part of setip. See LICENSE file for license information.
"""Logging setup for the setip command.

Modules log through ``logging.getLogger(__name__)``; only the command line
entry point attaches a handler. User facing progress is printed, logging
is for diagnostics and stays quiet below WARNING unless asked for.
"""

import logging
import sys
import time
from contextlib import suppress

DEFAULT_LOG_FORMAT = "%(asctime)s - %(filename)s[%(levelname)s]: %(message)s"


def level_from_name(name, default=logging.WARNING) -> int:
    """Map a level name such as 'debug' onto a logging level."""
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else default


def setup_basic_logging(level=logging.WARNING, formatter=None):
    """Send records at level and above to stderr."""
    root = logging.getLogger()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter or logging.Formatter(DEFAULT_LOG_FORMAT))
    handler.setLevel(level)
    root.addHandler(handler)
    root.setLevel(level)


def reset_logging():
    """Close and remove every root handler and unset the root level."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        handler.flush()
        handler.close()
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)


def flush_loggers(logger):
    """Flush the stream handlers of logger and of all its parents."""
    while logger:
        for handler in logger.handlers:
            if isinstance(handler, logging.StreamHandler):
                with suppress(OSError):
                    handler.flush()
        logger = logger.parent


def configure_root_logger():
    """Start from a clean root logger with UTC timestamps."""
    logging.Formatter.converter = time.gmtime
    reset_logging()
