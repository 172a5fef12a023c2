"""Root logger configuration for podcast_ingest entry points.

Library modules only ever call ``logging.getLogger(__name__)``; handlers are
attached here, by whoever runs the program (the CLI or an embedding service).
"""

from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Third-party loggers that are noisy at DEBUG
_QUIET_LOGGERS = ("urllib3", "urllib3.connectionpool")


def _has_file_handler(root_logger: logging.Logger, log_file: str) -> bool:
    target = os.path.abspath(log_file)
    return any(
        isinstance(h, logging.FileHandler) and h.baseFilename == target
        for h in root_logger.handlers
    )


def apply_log_level(level: str, log_file: Optional[str] = None) -> None:
    """Set the root log level and make sure console (and file) handlers exist.

    Calling this again only adjusts levels; it never stacks duplicate handlers.

    Args:
        level: Log level name (e.g. 'DEBUG', 'INFO', 'WARNING')
        log_file: Optional path; when given, records also go to this file

    Raises:
        ValueError: If the level name is not a logging level
        OSError: If the log file cannot be created
    """
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    if root_logger.handlers:
        for handler in root_logger.handlers:
            handler.setLevel(numeric_level)
    else:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(console_handler)

    if log_file and not _has_file_handler(root_logger, log_file):
        log_dir = os.path.dirname(os.path.abspath(log_file))
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))
