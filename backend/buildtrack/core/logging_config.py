"""
Logging configuration.

WHAT: Installs a single console handler on the root logger.

WHY: Every module logs through ``logging.getLogger(__name__)``; configuring
the root logger once at startup gives all of them the same format and the
request ID of the request they run in.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from buildtrack.middleware.request_context import get_request_context


class RequestIdFilter(logging.Filter):
    """Attach the current request ID (or "-") to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_request_context()
        record.request_id = ctx.request_id if ctx else "-"
        return True


class StructuredFormatter(logging.Formatter):
    """JSON formatter for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj)


def setup_logging(level: str = "INFO", fmt: str = "text") -> None:
    """
    Configure root logging for the application.

    Args:
        level: Log level name (DEBUG, INFO, ...)
        fmt: "json" for structured output, anything else for plain text
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    if fmt == "json":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s %(name)-30s [%(request_id)s] %(message)s"
            )
        )

    root = logging.getLogger()
    # Clear existing handlers to avoid duplicates when the app is rebuilt
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)

    # Reduce library noise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
