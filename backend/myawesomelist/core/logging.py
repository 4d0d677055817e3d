"""
Structured Logging Configuration.

Supports two modes:
- text: Human-readable format for development
- json: Structured JSON format for production

Set LOG_FORMAT to "json" for production and LOG_LEVEL to one of
debug, info (default), warn|warning, error.
"""

import json
import logging
import sys
from typing import Any, Dict, Optional

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_log_level(value: Optional[str]) -> int:
    """Map a LOG_LEVEL string to a logging level, defaulting to INFO."""
    return _LEVELS.get((value or "").strip().lower(), logging.INFO)


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs JSON strings with tracing context.

    Includes correlation_id, repo and task_name from TracingContext so logs
    from one request or Celery task can be filtered together.
    """

    def format(self, record: logging.LogRecord) -> str:
        from myawesomelist.core.tracing import TracingContext

        ctx = TracingContext.get()

        log_record: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "line": record.lineno,
            "correlation_id": ctx.get("correlation_id", ""),
            "repo": ctx.get("repo", ""),
            "task_name": ctx.get("task_name", ""),
        }

        if hasattr(record, "task_id"):
            log_record["task_id"] = record.task_id

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record)


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Setup logging for the application.

    Falls back to LOG_LEVEL / LOG_FORMAT from settings when arguments are
    not given.
    """
    from myawesomelist.config import settings

    root_logger = logging.getLogger()
    root_logger.setLevel(parse_log_level(level or settings.LOG_LEVEL))

    # Avoid adding multiple handlers
    if root_logger.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)

    if (log_format or settings.LOG_FORMAT).lower() == "json":
        handler.setFormatter(JSONFormatter())
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)

    root_logger.addHandler(handler)

    # Set lower level for noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
