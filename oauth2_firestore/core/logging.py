"""
Logging setup for applications embedding the token store.

Package modules only emit records through ``logging.getLogger(__name__)``.
The level chosen here is applied to the package logger as well, so store
debug records show up even when the host application already installed
root handlers of its own.
"""

import logging
import sys

PACKAGE_LOGGER = "oauth2_firestore"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Install the line format on stdout and set the token store's log level."""
    normalized = level.upper()
    logging.basicConfig(level=normalized, format=LOG_FORMAT, stream=sys.stdout)
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(normalized)
    return package_logger


__all__ = ["LOG_FORMAT", "PACKAGE_LOGGER", "configure_logging"]
