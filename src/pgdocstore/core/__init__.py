"""Core pgdocstore utilities.

This module exports core utilities for use throughout the library.
"""

from pgdocstore.core.config import Settings, get_settings
from pgdocstore.core.logging import LoggingContext, configure_logging, get_logger

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "LoggingContext",
]
