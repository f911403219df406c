"""
Logging configuration - Console and file handlers on the root logger.

Log lines look like ``[2026-01-01 12:00:00,000] INFO: message``.
"""

import logging
import sys
from pathlib import Path

from src.config.settings import Settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"

# Marks handlers installed here so repeated calls replace rather than stack them
_HANDLER_FLAG = "_idregister_handler"


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Install console and (optionally) file handlers on the root logger.

    Safe to call more than once: previously installed handlers from this
    function are removed first, handlers installed by others are kept.

    Args:
        settings: Application settings (log_level, log_file)

    Returns:
        The configured root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level.upper())

    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            root_logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    setattr(console_handler, _HANDLER_FLAG, True)
    root_logger.addHandler(console_handler)

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_FLAG, True)
        root_logger.addHandler(file_handler)

    return root_logger
