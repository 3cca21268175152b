"""Structured logging for the forecast service."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Record attributes copied into the JSON payload when present
CONTEXT_FIELDS = ("latitude", "longitude", "duration_ms")

# Chatty third-party loggers held at WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with forecast context when attached."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        payload.update(
            (field, getattr(record, field))
            for field in CONTEXT_FIELDS
            if hasattr(record, field)
        )
        return json.dumps(payload)


def setup_logging(level: str = "INFO", json_format: bool = True) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        level: Logging level name, case insensitive.
        json_format: Emit JSON lines instead of plain text.
    """
    numeric_level = getattr(logging, level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(
        JSONFormatter() if json_format else logging.Formatter(PLAIN_FORMAT)
    )
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class CoordinateAdapter(logging.LoggerAdapter):
    """Adds the coordinate being served to every record."""

    def process(
        self, msg: str, kwargs: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(
    name: str,
    latitude: float | None = None,
    longitude: float | None = None,
) -> logging.LoggerAdapter:
    """Return a logger that tags records with ``latitude``/``longitude``."""
    extra = {
        key: value
        for key, value in (("latitude", latitude), ("longitude", longitude))
        if value is not None
    }
    return CoordinateAdapter(logging.getLogger(name), extra)
