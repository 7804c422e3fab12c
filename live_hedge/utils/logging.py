"""
Structured logging for the live hedge core.

Plain-text output by default; set LOG_FORMAT=json for one JSON object per
line (for log shippers). Level comes from LOG_LEVEL (default INFO).
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logger(
    name: str,
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
) -> logging.Logger:
    """
    Configure and return a named logger.

    Calling twice with the same name returns the same logger without
    attaching a second handler.

    Args:
        name: Logger name (usually __name__)
        level: Level name; defaults to LOG_LEVEL env or INFO
        json_format: Force JSON output; defaults to LOG_FORMAT == "json"

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    if logger.handlers:
        return logger

    if json_format is None:
        json_format = os.getenv("LOG_FORMAT", "").lower() == "json"

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(DEFAULT_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Convenience wrapper used by every module: ``logger = get_logger(__name__)``."""
    return setup_logger(name)
