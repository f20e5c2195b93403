"""
Logging setup for the API process.

``LOG_FORMAT=json`` emits one JSON object per record for log shippers; the
default ``text`` format is meant for a terminal. Records created outside a
request carry the correlation id ``system``.
"""
import os
import sys
import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

SYSTEM_CORRELATION_ID = "system"
TEXT_FORMAT = '%(asctime)s %(levelname)-8s %(name)s [%(correlation_id)s] %(message)s'
QUIET_LOGGERS = ('uvicorn.access', 'httpx', 'httpcore')

# Attributes every LogRecord has; anything else came in through ``extra``
_RESERVED = frozenset(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'correlation_id'}


def _ensure_correlation_id(record: logging.LogRecord) -> None:
    if not hasattr(record, 'correlation_id'):
        record.correlation_id = SYSTEM_CORRELATION_ID


class CorrelationIdFilter(logging.Filter):
    """Give records logged outside a request the system correlation id."""

    def filter(self, record: logging.LogRecord) -> bool:
        _ensure_correlation_id(record)
        return True


class JSONFormatter(logging.Formatter):
    """One JSON document per record, ``extra`` fields included at top level."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "timestamp": timestamp.isoformat(timespec='milliseconds').replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", SYSTEM_CORRELATION_ID),
            "function": record.funcName,
            "line": record.lineno,
        }
        payload.update(
            (key, value) for key, value in vars(record).items()
            if key not in _RESERVED and not key.startswith('_')
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    def __init__(self):
        super().__init__(fmt=TEXT_FORMAT, datefmt='%H:%M:%S')

    def format(self, record: logging.LogRecord) -> str:
        _ensure_correlation_id(record)
        return super().format(record)


def configure_logging(log_level: Optional[str] = None) -> None:
    """
    Replace the root handlers with a single stdout handler.

    Args:
        log_level: Level name, case-insensitive. Falls back to LOG_LEVEL, then INFO.
    """
    use_json = os.getenv('LOG_FORMAT', 'text').strip().lower() == 'json'
    level = logging.getLevelName((log_level or os.getenv('LOG_LEVEL') or 'INFO').upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(JSONFormatter() if use_json else TextFormatter())

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
