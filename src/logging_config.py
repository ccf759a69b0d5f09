"""Structured logging for the dashboard API.

In dev: human-readable lines tagged with the request id
In prod (LOG_FORMAT=json): JSON lines for log aggregators
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

from src.middleware.request_id import request_id_var


class RequestIDFilter(logging.Filter):
    """Copy the current request id (if any) onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """Emit structured JSON log lines."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log["exception"] = self.formatException(record.exc_info)
        request_id = getattr(record, "request_id", "-")
        if request_id and request_id != "-":
            log["request_id"] = request_id
        for key in ("upstream_error", "status_code"):
            if hasattr(record, key):
                log[key] = getattr(record, key)
        return json.dumps(log, default=str, ensure_ascii=False)


def setup_logging():
    """Configure logging based on environment."""
    log_format = os.getenv("LOG_FORMAT", "text")
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level, logging.INFO))

    # Remove existing handlers
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDFilter())
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        ))

    root.addHandler(handler)

    # Quiet noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
