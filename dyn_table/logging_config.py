from __future__ import annotations

import logging
import os
from typing import Optional, Union

from pythonjsonlogger import jsonlogger

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
JSON_FIELDS = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Chatty third-party loggers kept at WARNING unless debugging
_NOISY_LOGGERS = ("werkzeug", "urllib3")


def _resolve_level(level: Optional[Union[int, str]]) -> int:
    if level is None:
        level = os.getenv("DYN_TABLE_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        return resolved if isinstance(resolved, int) else logging.INFO
    return level


def configure_logging(
        level: Optional[Union[int, str]] = None,
        force_format: Optional[str] = None,
) -> None:
    """
    Configure the root logger for the table engine and its host.

    Modes:
    - JSON (default), one object per record with any `extra` fields merged in
    - plain text for local development

    Selection order for the format:
        1) force_format argument ("json" or "plain") if provided
        2) env var DYN_TABLE_LOG_FORMAT
        3) default = "json"

    Level comes from the argument, else DYN_TABLE_LOG_LEVEL, else INFO.
    """
    format_mode = (force_format or os.getenv("DYN_TABLE_LOG_FORMAT", "json")).lower()
    resolved_level = _resolve_level(level)

    root = logging.getLogger()
    root.setLevel(resolved_level)

    handler = logging.StreamHandler()
    if format_mode == "plain":
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    else:
        handler.setFormatter(jsonlogger.JsonFormatter(JSON_FIELDS))

    # Replace any existing handlers to avoid duplicate logs
    root.handlers.clear()
    root.addHandler(handler)

    if resolved_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
