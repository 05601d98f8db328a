"""JSON logging with request correlation.

Every record carries the correlation ID of the request being served, so
cache misses, store failures and merge reports can be traced back to the
HTTP call that caused them.
"""

import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from config import settings

correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


class StructuredFormatter(JsonFormatter):
    """JSON lines: timestamp, level, logger, message, correlation ID, context, source."""

    def __init__(self):
        super().__init__(json_ensure_ascii=False, json_default=str)

    def add_fields(self, log_record, record, message_dict):
        log_record["timestamp"] = (
            datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z")
        )
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["message"] = record.getMessage()
        log_record["correlation_id"] = correlation_id.get()

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        context = getattr(record, "context", None)
        if context:
            log_record["extra"] = context

        log_record["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }


class StructuredLogger:
    """
    Thin wrapper over `logging.Logger` taking context as keyword arguments.

        cache_logger.warning("Cache GET failed", key=key, error=str(exc))
    """

    def __init__(self, name: str, level: str = settings.LOG_LEVEL):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level, logging.INFO))
        self.logger.propagate = False

        self.logger.handlers.clear()
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        self.logger.addHandler(handler)

    def _log(self, level: int, message: str, exc_info=False, **context):
        # stacklevel 3 points `source` at the caller, not at this wrapper
        self.logger.log(
            level,
            message,
            exc_info=exc_info,
            extra={"context": context} if context else None,
            stacklevel=3,
        )

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, **context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, **context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, **context)

    def error(self, message: str, **context):
        self._log(logging.ERROR, message, **context)

    def critical(self, message: str, **context):
        self._log(logging.CRITICAL, message, **context)

    def exception(self, message: str, **context):
        """Log at ERROR with the active exception's traceback."""
        self._log(logging.ERROR, message, exc_info=True, **context)


logger = StructuredLogger("storefront")
api_logger = StructuredLogger("storefront.api")
db_logger = StructuredLogger("storefront.database")
cache_logger = StructuredLogger("storefront.cache")


def set_correlation_id(cid: str):
    correlation_id.set(cid)


def get_correlation_id() -> Optional[str]:
    return correlation_id.get()


def clear_correlation_id():
    correlation_id.set(None)
