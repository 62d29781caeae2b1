from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

from opentelemetry import trace

from floorsvc.api.middleware.request_id import get_request_id

_LOGGING_CONFIGURED = False

# Structured fields callers may pass through ``extra=``.
_EXTRA_FIELDS = (
    "method",
    "path",
    "status_code",
    "duration_ms",
    "operation",
    "channel",
    "table_id",
    "order_id",
    "user_id",
    "count",
    "attempt",
    "released",
)


def _trace_fields() -> tuple[str | None, str | None]:
    span = trace.get_current_span()
    span_context = span.get_span_context()
    if not span_context.is_valid:
        return None, None
    return (
        format(span_context.trace_id, "032x"),
        format(span_context.span_id, "016x"),
    )


class JsonFormatter(logging.Formatter):
    def __init__(self, service: str = "floorsvc") -> None:
        super().__init__()
        self._service = service

    def format(self, record: logging.LogRecord) -> str:
        trace_id, span_id = _trace_fields()
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self._service,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": get_request_id(),
            "trace_id": trace_id,
            "span_id": span_id,
        }

        for key in _EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def configure_logging() -> None:
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(service=os.getenv("OTEL_SERVICE_NAME", "floorsvc")))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # SQL echo stays off unless explicitly requested.
    logging.getLogger("sqlalchemy.engine").setLevel(os.getenv("SQL_LOG_LEVEL", "WARNING").upper())

    _LOGGING_CONFIGURED = True
