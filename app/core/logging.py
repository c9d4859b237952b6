"""Logging setup.

Records may carry two extras: ``request_id`` (set by RequestLoggingMiddleware)
and ``llm_model`` (set on backend failures). Both show up in the JSON output and
in the plain text format.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from app.core.config import settings

_EXTRA_FIELDS = ("request_id", "llm_model")


class ContextFilter(logging.Filter):
    """Give every record the extra fields so format strings never KeyError."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name in _EXTRA_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, None)
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in _EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value
        if record.exc_info and record.exc_info[1]:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    def __init__(self):
        super().__init__("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        tags = [f"{name}={getattr(record, name)}" for name in _EXTRA_FIELDS if getattr(record, name, None)]
        return f"{line} [{' '.join(tags)}]" if tags else line


def setup_logging() -> None:
    """Install a single stdout handler on the root logger."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JSONFormatter() if settings.log_json else TextFormatter())
    root.addHandler(handler)

    # Request lines come from RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(level if settings.app_debug else logging.WARNING)
