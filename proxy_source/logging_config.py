from __future__ import annotations

import logging
import os
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

FORMAT_ENV = "PROXY_SOURCE_LOG_FORMAT"
LEVEL_ENV = "PROXY_SOURCE_LOG_LEVEL"

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _resolve_level(level: Optional[int]) -> int:
    if level is not None:
        return level
    level_name = os.getenv(LEVEL_ENV, "INFO").upper()
    resolved = logging.getLevelName(level_name)
    if not isinstance(resolved, int):
        raise ValueError(f"Unsupported log level: {level_name}")
    return resolved


def build_formatter(format_mode: str) -> logging.Formatter:
    """'json' -> JsonFormatter (extra= fields become keys), 'plain' -> one text line per record."""
    mode = format_mode.lower()
    if mode == "json":
        return JsonFormatter(JSON_FORMAT)
    if mode == "plain":
        return logging.Formatter(PLAIN_FORMAT)
    raise ValueError(f"Unsupported log format: {format_mode}")


def configure_logging(
        level: Optional[int] = None,
        force_format: Optional[str] = None,
) -> None:
    """
    Send proxy_source logs (and everything else on the root logger) to stderr.

    Structured fields passed through `extra=` (proxy_id, source, n_records...)
    show up as JSON keys in json mode and are dropped in plain mode.

    The format comes from `force_format`, else $PROXY_SOURCE_LOG_FORMAT, else "json".
    The level comes from `level`, else $PROXY_SOURCE_LOG_LEVEL by name, else INFO.
    """
    format_mode = force_format if force_format is not None else os.getenv(FORMAT_ENV, "json")
    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter(format_mode))

    root = logging.getLogger()
    root.setLevel(_resolve_level(level))
    # Replace any existing handlers to avoid duplicate logs
    root.handlers.clear()
    root.addHandler(handler)
