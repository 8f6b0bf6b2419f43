"""Key=value logging for the Funding Engine."""

import logging
import sys
from typing import Any

# Record attributes promoted into the log line when passed via extra=
CONTEXT_FIELDS = ("tenant_id", "notification_id", "action", "fields", "populated")

NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "urllib3")


class StructuredFormatter(logging.Formatter):
    """Renders records as `key=value` pairs on one line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "module": record.module,
            "function": record.funcName,
            "message": record.getMessage(),
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                entry[field] = getattr(record, field)

        if hasattr(record, "context"):
            entry.update(record.context)

        line = " ".join(f"{k}={v}" for k, v in entry.items())
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _level() -> int:
    try:
        from app.core.config import get_settings

        return logging.DEBUG if get_settings().FUNDING_ENV == "dev" else logging.INFO
    except Exception:
        return logging.INFO


def setup_logging() -> None:
    """Quiet chatty HTTP client loggers. Safe to call more than once."""
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Logger writing key=value lines to stdout.

    Level is DEBUG when FUNDING_ENV is dev, INFO otherwise.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.setLevel(_level())

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **context: Any) -> None:
    """Log `msg` with arbitrary context fields appended to the line."""
    tenant_id = context.pop("tenant_id", None)
    extra: dict[str, Any] = {"context": context}
    if tenant_id is not None:
        extra["tenant_id"] = tenant_id
    logger.log(level, msg, extra=extra)
