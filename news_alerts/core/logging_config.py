"""
Structured logging for the alerts client.

Records from the ``news_alerts`` logger tree are rendered as one JSON object
per line. Well-known extras (component, operation, method, path,
status_code, duration_ms) become top-level keys; anything else passed via
``extra=`` lands under ``"extra"``. A correlation id ties together the log
lines of one logical operation.
"""

import json
import logging
import sys
import time
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Dict, Optional

from .config import settings

PACKAGE_LOGGER = "news_alerts"

_correlation_id: ContextVar[Optional[str]] = ContextVar("news_alerts_correlation_id", default=None)

_PROMOTED_FIELDS = ("component", "operation", "method", "path", "status_code", "duration_ms")

# attributes every LogRecord carries; whatever else is on a record came from extra=
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


class StructuredFormatter(logging.Formatter):
    """Render a LogRecord as a single JSON line"""

    def __init__(self, include_extra: bool = True):
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }
        correlation_id = get_correlation_id()
        if correlation_id:
            payload["correlation_id"] = correlation_id

        custom = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}
        for field in _PROMOTED_FIELDS:
            value = custom.pop(field, None)
            if value is not None:
                payload[field] = value
        if self.include_extra and custom:
            payload["extra"] = custom

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            payload["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        return json.dumps(payload, ensure_ascii=False, default=str)


class LoggingManager:
    """Owns the console handler attached to the package logger"""

    def __init__(self):
        self.handler: Optional[logging.Handler] = None

    @property
    def configured(self) -> bool:
        return self.handler is not None

    def setup_logging(self, log_level: str = "INFO", enable_json: bool = True) -> None:
        if self.configured:
            return

        handler = logging.StreamHandler(sys.stderr)
        if enable_json:
            handler.setFormatter(StructuredFormatter())
        else:
            handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-7s %(name)s: %(message)s"))

        package_logger = logging.getLogger(PACKAGE_LOGGER)
        package_logger.setLevel(log_level.upper())
        package_logger.addHandler(handler)
        self.handler = handler
        package_logger.debug("Logging configured", extra={'component': 'logging'})

    def close(self) -> None:
        if self.handler is None:
            return
        logging.getLogger(PACKAGE_LOGGER).removeHandler(self.handler)
        self.handler.close()
        self.handler = None


logging_manager = LoggingManager()


def setup_logging() -> None:
    """Configure package logging from settings"""
    logging_manager.setup_logging(log_level=settings.log_level, enable_json=settings.log_json)


def log_operation(component: Optional[str] = None, operation: Optional[str] = None):
    """
    Log the duration and outcome of an async operation.

    Failures are logged at WARNING and re-raised unchanged. The component
    defaults to the parent package of the decorated function's module.
    """
    def decorator(func):
        module = func.__module__
        logger = logging.getLogger(module)
        name = operation or func.__name__
        parts = module.split(".")
        component_name = component or parts[max(len(parts) - 2, 0)]

        @wraps(func)
        async def wrapper(*args, **kwargs):
            # an outer operation keeps its id; a top-level one gets its own for its duration only
            id_token = None
            if get_correlation_id() is None:
                id_token = _correlation_id.set(uuid.uuid4().hex[:8])

            started = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.warning(
                    f"Failed {name}",
                    extra={
                        'component': component_name,
                        'operation': name,
                        'duration_ms': (time.perf_counter() - started) * 1000,
                        'error': str(e),
                    }
                )
                raise
            else:
                logger.info(
                    f"Completed {name}",
                    extra={
                        'component': component_name,
                        'operation': name,
                        'duration_ms': (time.perf_counter() - started) * 1000,
                    }
                )
                return result
            finally:
                if id_token is not None:
                    _correlation_id.reset(id_token)

        return wrapper
    return decorator
