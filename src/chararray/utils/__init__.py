"""Utility modules for chararray.

Provides:
- logger: get_logger for logging
"""

from chararray.utils.logger import get_logger

__all__ = [
    "get_logger",
]
