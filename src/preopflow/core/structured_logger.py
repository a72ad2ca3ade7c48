"""
Structured logging utilities for the ``preopflow`` logger namespace
"""

import json
import logging
import sys
from typing import Any, Dict

from .utils.datetime_utils import get_current_timestamp

ROOT_LOGGER = "preopflow"
TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class StructuredLogger:
    """
    Structured logger that attaches keyword fields to JSON log lines
    """

    def __init__(self, name: str, level: int = logging.INFO):
        self.logger = logging.getLogger(name)
        if self.logger.level == logging.NOTSET:
            self.logger.setLevel(level)

    def log(self, level: str, message: str, **kwargs):
        """Log with structured data"""
        self.logger.log(
            logging.getLevelName(level.upper()), message, extra={"extra_data": kwargs}
        )

    def info(self, message: str, **kwargs):
        self.log("info", message, **kwargs)

    def warning(self, message: str, **kwargs):
        self.log("warning", message, **kwargs)

    def error(self, message: str, **kwargs):
        self.log("error", message, **kwargs)

    def debug(self, message: str, **kwargs):
        self.log("debug", message, **kwargs)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "timestamp": get_current_timestamp().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process": record.process,
        }

        request_id = getattr(record, "request_id", None)
        if request_id:
            log_obj["request_id"] = request_id

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_data"):
            log_obj.update(record.extra_data)

        return json.dumps(log_obj, default=str)


def configure_logging(level: str = "INFO", fmt: str = "json") -> logging.Logger:
    """Attach a single stdout handler to the ``preopflow`` logger.

    Safe to call more than once; the previous handler is replaced.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper())
    for handler in list(logger.handlers):
        if getattr(handler, "_preopflow_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler._preopflow_handler = True
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str = ROOT_LOGGER) -> StructuredLogger:
    """Get or create a structured logger"""
    return StructuredLogger(name)
