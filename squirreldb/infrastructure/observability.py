"""Structured Logging — JSON formatter and setup for store observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (table, record_id, operation, error_kind, mirror_count) surfaced when present
    - setup_logging configures the `squirreldb` logger only, never the root logger
    - Calling setup_logging again replaces its handler instead of adding a second one

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - Opt-in: importing the package installs no handlers; SquirrelDB(configure_logging=True)
      calls setup_logging with Settings.log_level and Settings.log_format
"""

import json
import logging
from datetime import datetime, timezone

PACKAGE_LOGGER = "squirreldb"
_HANDLER_NAME = "squirreldb.stream"

EXTRA_FIELDS = (
    "table", "record_id", "operation", "error_kind", "mirror_count",
)


class JSONFormatter(logging.Formatter):
    """Format logs as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Attach a stream handler to the package logger; returns the handler."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    handler.set_name(_HANDLER_NAME)
    logger = logging.getLogger(PACKAGE_LOGGER)
    for old in [h for h in logger.handlers if h.get_name() == _HANDLER_NAME]:
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
