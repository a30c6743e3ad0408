import logging
import sys
import os
from typing import Dict, Any, Optional
import json
from datetime import datetime, timezone
import contextlib
import contextvars
from pathlib import Path

from timebill.core.config import settings

# Request-scoped values (request_id, client_id, bill_id, ...) attached to every record
request_context = contextvars.ContextVar("request_context", default={})


class JsonFormatter(logging.Formatter):
    """
    Formatter that renders each record as a single JSON object.
    """

    def __init__(self, **kwargs):
        super().__init__()
        self.fmt_dict = kwargs

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(self._prepare_log_dict(record), default=str)

    def _prepare_log_dict(self, record: logging.LogRecord) -> Dict[str, Any]:
        record_dict = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            record_dict["exception"] = self.formatException(record.exc_info)

        for key in self.fmt_dict:
            if key in record.__dict__:
                record_dict[key] = record.__dict__[key]

        # Values passed via extra={"details": ...} in the error handlers
        details = getattr(record, "details", None)
        if details:
            record_dict["details"] = details

        for key, value in request_context.get().items():
            if key not in record_dict:
                record_dict[key] = value

        return record_dict


class ContextFilter(logging.Filter):
    """
    Filter that copies the current request context onto log records.
    """

    def filter(self, record):
        for key, value in request_context.get().items():
            setattr(record, key, value)
        return True


def setup_logging(level: Optional[str] = None):
    """
    Set up logging for the application.

    Args:
        level: Optional log level override (default to settings)
    """
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.addFilter(ContextFilter())

    console_handler = logging.StreamHandler(sys.stdout)

    if settings.ENVIRONMENT == "production":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s (%(filename)s:%(lineno)d) - %(message)s"
        )

    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        try:
            os.makedirs(Path(settings.LOG_FILE).parent, exist_ok=True)
            file_handler = logging.FileHandler(settings.LOG_FILE)
            file_handler.setFormatter(formatter)
            file_handler.setLevel(log_level)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(f"Could not set up file logging at {settings.LOG_FILE}: {e}")

    # Quiet third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logging.getLogger("timebill")


@contextlib.contextmanager
def log_context(**context_data):
    """
    Context manager for adding context to logs.

    Usage:
        with log_context(client_id=3, action="create_bill"):
            logger.info("Generating bill")

    Args:
        **context_data: Key-value pairs to add to log context
    """
    current_context = request_context.get().copy()
    current_context.update(context_data)
    token = request_context.set(current_context)

    try:
        yield
    finally:
        request_context.reset(token)
