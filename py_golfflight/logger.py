"""Logging configuration and utilities for py_golfflight library.

This module provides a centralized logging system for the library, including console
and optional file logging. By default only console logging is enabled at INFO level;
file logging can be switched on for detailed analysis of flights and optimizer runs.

Global Variables:
    - logger: Pre-configured logger instance for the library.
    - file_handler: Global file handler reference (None when file logging disabled).

Functions:
    enable_file_logging: Enable logging to a file with DEBUG level.
    disable_file_logging: Disable file logging and clean up resources.

Examples:
    ```python
    from py_golfflight.logger import logger, enable_file_logging, disable_file_logging

    enable_file_logging("golfflight_debug.log")
    logger.info("Optimization started")
    disable_file_logging()
    ```
"""
import logging
from typing import Optional

__all__ = ('logger',
           'enable_file_logging',
           'disable_file_logging',
)

formatter = logging.Formatter("%(levelname)s:%(name)s:%(message)s")
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)
console_handler.setLevel(logging.DEBUG)  # Lowest level for console

logger: logging.Logger = logging.getLogger('py_golfflight')
logger.addHandler(console_handler)
logger.setLevel(logging.INFO)

# File handler (optional, added dynamically)
file_handler: Optional[logging.FileHandler] = None


def enable_file_logging(filename: str = "debug.log") -> None:
    """Enable logging to a file with DEBUG level output.

    Replaces any existing file handler. The file is opened in append mode.

    Args:
        filename: Name of the log file to create. Defaults to "debug.log".
    """
    global file_handler
    if file_handler is not None:
        disable_file_logging()

    file_handler = logging.FileHandler(filename)
    file_handler.setLevel(logging.DEBUG)  # Log everything to the file
    file_formatter = logging.Formatter("%(asctime)s:%(levelname)s:%(message)s")
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)


def disable_file_logging() -> None:
    """Disable file logging and close the file handle.

    Safe to call when file logging is not enabled.
    """
    global file_handler
    if file_handler is not None:
        logger.removeHandler(file_handler)
        file_handler.close()
        file_handler = None
