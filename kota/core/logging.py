"""Structured logging for the KOTA OS engine.

Lines are key=value pairs. Records are owned by email address, so the
`owner` field is always masked before it is written. Pipeline context
(owner, entity kind, operation, record id, workflow) travels as named fields
through `log_with_context` rather than being formatted into the message.

Usage:
    from kota.core.logging import get_logger, log_with_context

    logger = get_logger(__name__)
    log_with_context(logger, logging.INFO, "Committed", owner=owner, entity_kind="task")
"""

import logging
import sys
from typing import Any

# Named fields lifted out of log_with_context kwargs, in output order
CONTEXT_FIELDS = ("owner", "entity_kind", "operation", "record_id", "workflow")


def mask_email(value: str) -> str:
    """'pat@example.com' -> 'p***@example.com'."""
    local, sep, domain = value.partition("@")
    if not sep:
        return f"{value[:1]}***" if value else value
    return f"{local[:1]}***@{domain}"


class StructuredFormatter(logging.Formatter):
    """key=value formatter with owner masking."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is None:
                continue
            if field == "owner":
                value = mask_email(str(value))
            # Enum members (EntityKind, IntentOperation) print as their value
            log_data[field] = getattr(value, "value", value)

        log_data.update(getattr(record, "extra_data", None) or {})

        if record.exc_info:
            log_data["error"] = self.formatException(record.exc_info).splitlines()[-1]

        return " ".join(f"{k}={v}" for k, v in log_data.items())


def _configured_level() -> int:
    from kota.core.config import get_settings

    settings = get_settings()
    if settings.LOG_LEVEL:
        return logging.getLevelNamesMapping().get(settings.LOG_LEVEL.upper(), logging.INFO)
    return logging.DEBUG if settings.KOTA_ENV == "dev" else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    The level comes from LOG_LEVEL when set, otherwise DEBUG in dev and INFO
    elsewhere.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)

        try:
            logger.setLevel(_configured_level())
        except Exception:
            # Settings are not loadable yet (e.g. at import time without env)
            logger.setLevel(logging.INFO)

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    """
    Log with context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: CONTEXT_FIELDS become named fields; anything else is
            appended as extra key=value pairs
    """
    extra: dict[str, Any] = {field: kwargs.pop(field) for field in CONTEXT_FIELDS if field in kwargs}
    extra["extra_data"] = kwargs
    logger.log(level, msg, extra=extra)
