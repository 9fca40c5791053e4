"""Minimal logging utilities for chararray.

Provides a simple get_logger function that wraps the standard library logging.

Example:
    >>> from chararray.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Growing buffer")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "chararray." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("buffer")
        >>> logger.name
        'chararray.buffer'
    """
    if not (name == "chararray" or name.startswith("chararray.")):
        name = f"chararray.{name}"
    return logging.getLogger(name)
