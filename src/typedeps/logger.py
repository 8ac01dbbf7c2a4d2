"""Logging configuration for the command-line front end."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
# Per-request connection logs, only shown when debugging.
REQUEST_LOGGERS = ("urllib3",)


def setup_logger(level: str, stream: TextIO | None = None) -> None:
    """Send every log record at or above `level` to `stream` (stderr by default).

    Handlers installed by an earlier call are replaced, so calling this twice does not duplicate output.

    """
    level_value = logging.getLevelName(level.upper())
    if not isinstance(level_value, int):
        level_value = logging.INFO
    root_logger = logging.getLogger()
    root_logger.setLevel(level_value)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)

    request_level = logging.DEBUG if level_value <= logging.DEBUG else logging.WARNING
    for name in REQUEST_LOGGERS:
        logging.getLogger(name).setLevel(request_level)
