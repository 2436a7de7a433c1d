"""
Logging setup for the catalog client.

Every orchestrated operation runs inside ``correlation_id_context()`` and logs
its ``operation`` and ``seq`` through ``extra``. The filters here stamp those
fields on every record (with placeholders outside an operation) so that both
the text and the JSON output can show which dispatch a line belongs to, and
scrub bearer credentials before anything is written.

    with correlation_id_context():
        logger.info("search dispatched", extra={"operation": "search", "seq": 4})
"""

import logging
import os
import re
import uuid
from contextvars import ContextVar
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "job-catalog-client"
REDACTED = "[REDACTED]"

# One id per dispatched catalog operation
_correlation_id_ctx: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    return _correlation_id_ctx.get()


def generate_correlation_id() -> str:
    return f"op-{uuid.uuid4().hex[:16]}"


class correlation_id_context:
    """Binds a correlation id to the current task for the duration of the block."""

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id or generate_correlation_id()
        self.token = None

    def __enter__(self):
        self.token = _correlation_id_ctx.set(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        _correlation_id_ctx.reset(self.token)


class OperationContextFilter(logging.Filter):
    """Stamps correlation_id, operation and seq on every record."""

    PLACEHOLDER = "-"

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "none"
        if not hasattr(record, "operation"):
            record.operation = self.PLACEHOLDER
        if not hasattr(record, "seq"):
            record.seq = self.PLACEHOLDER
        return True


class SensitiveDataFilter(logging.Filter):
    """Redacts credentials from extra fields, message args and the message text."""

    SENSITIVE_KEYS = {
        "password", "token", "access_token", "api_key", "secret",
        "authorization", "bearer",
    }
    BEARER_PATTERN = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE)

    def filter(self, record: logging.LogRecord) -> bool:
        if record.args:
            record.args = self._redact(record.args)

        if isinstance(record.msg, str):
            record.msg = self.BEARER_PATTERN.sub(rf"\1{REDACTED}", record.msg)

        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE_KEYS:
                setattr(record, key, REDACTED)

        return True

    def _redact(self, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                k: REDACTED if str(k).lower() in self.SENSITIVE_KEYS else self._redact(v)
                for k, v in data.items()
            }
        if isinstance(data, list):
            return [self._redact(item) for item in data]
        if isinstance(data, tuple):
            return tuple(self._redact(item) for item in data)
        if isinstance(data, str):
            return self.BEARER_PATTERN.sub(rf"\1{REDACTED}", data)
        return data


class CatalogJsonFormatter(jsonlogger.JsonFormatter):
    """JSON lines carrying the operation context next to the message."""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["correlation_id"] = getattr(record, "correlation_id", "none")
        log_record["service"] = SERVICE_NAME

        # Placeholders only matter for the text layout
        for field in ("operation", "seq"):
            if log_record.get(field) == OperationContextFilter.PLACEHOLDER:
                log_record.pop(field)

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


JSON_FORMAT = "%(timestamp)s %(level)s %(logger)s %(correlation_id)s %(message)s"
TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(correlation_id)s %(operation)s#%(seq)s | %(name)s | %(message)s"


def build_handler(log_format: str = "text") -> logging.Handler:
    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(CatalogJsonFormatter(JSON_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.addFilter(OperationContextFilter())
    handler.addFilter(SensitiveDataFilter())
    return handler


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Install a single root handler.

    Arguments win over the environment:
    - LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default INFO)
    - LOG_FORMAT: json or text (default text)
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_format = (log_format or os.getenv("LOG_FORMAT", "text")).lower()

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(build_handler(log_format))
    root_logger.setLevel(level)

    # Request lines would repeat every catalog call
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
