"""
Logging configuration for GeoCache.

Provides structured JSON logging and an audit logger for lifecycle events.
Raw caller identifiers are masked before they reach a log record; salts and
commitments are never logged.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Optional

# Context variable for invocation ID tracking
invocation_id_var: ContextVar[str] = ContextVar('invocation_id', default='')


def mask_sensitive(value: Optional[str], visible_chars: int = 4) -> str:
    """Mask a value, showing only the last N characters."""
    if not value:
        return ''
    if len(value) <= visible_chars:
        return '*' * len(value)
    return '*' * (len(value) - visible_chars) + value[-visible_chars:]


class StructuredFormatter(logging.Formatter):
    """JSON formatter: one object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        invocation_id = invocation_id_var.get()
        if invocation_id:
            log_data["invocation_id"] = invocation_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class AuditLogger:
    """
    Logger for cache lifecycle events.

    One method per event; each emits a record whose `extra_fields` carry
    the event type, the cache key and event-specific details.
    """

    def __init__(self, name: str = "geocache.audit"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, key: str, **kwargs) -> None:
        if not self._logger.isEnabledFor(level):
            return
        message = kwargs.pop("message", "")
        extra = {
            "event_type": event_type,
            "key": key,
            "invocation_id": invocation_id_var.get(),
            **kwargs
        }

        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "",
            0,
            f"{event_type}: {message}",
            (),
            None
        )
        record.extra_fields = extra
        self._logger.handle(record)

    def cache_created(self, key: str, caller_id: str) -> None:
        self._log(
            logging.INFO,
            "CACHE_CREATED",
            key,
            caller=mask_sensitive(caller_id),
            message=f"Cache {key} created"
        )

    def cache_updated(self, key: str, fields: list) -> None:
        self._log(
            logging.INFO,
            "CACHE_UPDATED",
            key,
            fields=fields,
            message=f"Cache {key} updated: {', '.join(fields)}"
        )

    def cache_deleted(self, key: str) -> None:
        self._log(logging.INFO, "CACHE_DELETED", key, message=f"Cache {key} deleted")

    def visitor_admitted(self, key: str, caller_id: str, visitor_count: int) -> None:
        self._log(
            logging.INFO,
            "VISITOR_ADMITTED",
            key,
            caller=mask_sensitive(caller_id),
            visitor_count=visitor_count,
            message=f"Visitor logged in cache {key}"
        )

    def visitor_rejected(self, key: str, caller_id: str, x: int, y: int) -> None:
        self._log(
            logging.WARNING,
            "VISITOR_REJECTED",
            key,
            caller=mask_sensitive(caller_id),
            x=x,
            y=y,
            message=f"Visitor outside the range of cache {key}"
        )

    def trackable_switched(self, key: str, previous_id: str, new_id: str) -> None:
        self._log(
            logging.INFO,
            "TRACKABLE_SWITCHED",
            key,
            previous_trackable=previous_id,
            new_trackable=new_id,
            message=f"Trackable {previous_id} exchanged for {new_id}"
        )

    def report_filed(self, key: str, report_id: str, report_count: int) -> None:
        self._log(
            logging.INFO,
            "REPORT_FILED",
            key,
            report_id=report_id,
            report_count=report_count,
            message=f"Report {report_id} filed against cache {key}"
        )

    def reports_read(self, key: str, report_count: int) -> None:
        self._log(
            logging.INFO,
            "REPORTS_READ",
            key,
            report_count=report_count,
            message=f"Owner read {report_count} reports of cache {key}"
        )

    def ownership_denied(self, key: str, caller_id: str, operation: str) -> None:
        self._log(
            logging.WARNING,
            "OWNERSHIP_DENIED",
            key,
            caller=mask_sensitive(caller_id),
            operation=operation,
            message=f"Non-owner attempted to {operation} cache {key}"
        )

    def store_failure(self, key: str, operation: str, error: str) -> None:
        self._log(
            logging.ERROR,
            "STORE_FAILURE",
            key,
            operation=operation,
            error=error,
            message=f"Store {operation} failed for {key}"
        )


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting (recommended for production)
        log_file: Optional file path for log output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def set_invocation_id(invocation_id: Optional[str] = None) -> str:
    """
    Set the invocation ID for the current context.

    Args:
        invocation_id: ID to set, or None to generate one

    Returns:
        The invocation ID that was set
    """
    if not invocation_id:
        invocation_id = str(uuid.uuid4())
    invocation_id_var.set(invocation_id)
    return invocation_id


def get_invocation_id() -> str:
    """Get the current invocation ID."""
    return invocation_id_var.get()


# Global audit logger instance
audit_log = AuditLogger()
