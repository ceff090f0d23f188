"""
Structured JSON logging.

Records carry the request context the advisor pipeline cares about (org,
perspective, request and user) as top-level JSON keys when a caller passes
them through ``extra``.
"""

import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict


CONTEXT_FIELDS = ("org_id", "perspective", "request_id", "user_email", "file_count", "fragment_count")


class StructuredFormatter(logging.Formatter):
    """One JSON object per record"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        for field_name in CONTEXT_FIELDS:
            value = getattr(record, field_name, None)
            if value is not None:
                log_data[field_name] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(level: str = "INFO") -> None:
    """Route the root logger to stdout as JSON; safe to call more than once"""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(root_logger.handlers):
        if isinstance(handler.formatter, StructuredFormatter):
            root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter())
    root_logger.addHandler(console_handler)

    # Noisy third-party loggers
    logging.getLogger("uvicorn.access").disabled = True
    for name in ("sqlalchemy.engine", "httpx", "openai"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def context_extra(**context: Any) -> Dict[str, Any]:
    """Keep only known context keys so ``extra`` never clobbers LogRecord attributes."""
    return {key: value for key, value in context.items() if key in CONTEXT_FIELDS}


class LoggerMixin:
    """Per-class logger named after the defining module and class"""

    @property
    def logger(self) -> logging.Logger:
        cls = self.__class__
        return logging.getLogger(f"{cls.__module__}.{cls.__qualname__}")

    def log_debug(self, message: str, **context):
        self.logger.debug(message, extra=context_extra(**context))

    def log_info(self, message: str, **context):
        self.logger.info(message, extra=context_extra(**context))

    def log_warning(self, message: str, **context):
        self.logger.warning(message, extra=context_extra(**context))
