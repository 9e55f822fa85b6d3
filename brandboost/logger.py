"""
Logging configuration.

Every module logs through the single ``brandboost`` logger exposed here.
"""

import logging
import sys

from .config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logger(name: str = "brandboost") -> logging.Logger:
    """Configure and return the application logger."""
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
    log.setLevel(LOG_LEVEL)
    log.propagate = False
    return log


logger = setup_logger()
