"""Logging helpers for mdpreview.

Wraps the standard library logging module. Every logger lives under the
``mdpreview`` namespace so an embedding application can tune the whole
pipeline with one ``logging.getLogger("mdpreview").setLevel(...)`` call.

Example:
    >>> from mdpreview.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("highlighting %s", "python")
"""

from __future__ import annotations

import logging

ROOT_LOGGER_NAME = "mdpreview"

# Library convention: stay silent unless the application configures logging.
logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance under the "mdpreview." prefix

    Example:
        >>> get_logger("sanitize").name
        'mdpreview.sanitize'
    """
    if not (name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + ".")):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
