"""Logging for sqlarrays.

All loggers live under the ``sqlarrays`` namespace. Statement logs carry the
operation name and a whitespace-collapsed preview of the SQL as structured
fields, and every record picks up the correlation ID of the current context.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, Final

from sqlarrays._serialization import encode_json

if TYPE_CHECKING:
    from collections.abc import Iterable
    from logging import LogRecord
    from typing import TextIO

__all__ = (
    "ContextFilter",
    "StructuredFormatter",
    "configure_logging",
    "get_correlation_id",
    "get_logger",
    "log_statement",
    "log_with_context",
    "set_correlation_id",
    "sql_preview",
)

ROOT_LOGGER_NAME: Final = "sqlarrays"
SQL_PREVIEW_LENGTH: Final = 200
SIMPLE_FORMAT: Final = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_correlation_id: ContextVar[str | None] = ContextVar("sqlarrays_correlation_id", default=None)


def set_correlation_id(correlation_id: str | None) -> None:
    """Tag every record logged from the current context with ``correlation_id``; ``None`` clears it."""
    _correlation_id.set(correlation_id)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def sql_preview(sql: str, limit: int = SQL_PREVIEW_LENGTH) -> str:
    """Collapse runs of whitespace in ``sql`` and cut it to ``limit`` characters."""
    text = " ".join(sql.split())
    if len(text) <= limit:
        return text
    return f"{text[: limit - 3]}..."


class ContextFilter(logging.Filter):
    """Copies the correlation ID onto each record."""

    def filter(self, record: LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


class StructuredFormatter(logging.Formatter):
    """Formats each record as one JSON object.

    Fields given to :func:`log_with_context` or :func:`log_statement` are
    merged into the top level of the object.
    """

    def format(self, record: LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.lineno}",
        }
        correlation_id = getattr(record, "correlation_id", None) or get_correlation_id()
        if correlation_id:
            entry["correlation_id"] = correlation_id
        entry.update(getattr(record, "extra_fields", None) or {})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return encode_json(entry)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``sqlarrays`` or ``sqlarrays.<name>``, with the context filter attached once."""
    if name is None:
        name = ROOT_LOGGER_NAME
    elif not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    if not any(isinstance(f, ContextFilter) for f in logger.filters):
        logger.addFilter(ContextFilter())
    return logger


def configure_logging(
    level: str | int = "INFO",
    format_style: str = "structured",
    stream: TextIO | None = None,
    extra_handlers: Iterable[logging.Handler] = (),
) -> logging.Logger:
    """Send sqlarrays logs to ``stream`` (stdout by default), replacing earlier handlers.

    Args:
        level: Level name or number for the ``sqlarrays`` logger.
        format_style: ``"structured"`` for JSON lines, anything else for plain text.
        stream: Stream for the console handler.
        extra_handlers: Added as given, keeping their own formatters.

    Returns:
        The ``sqlarrays`` logger.
    """
    logger = get_logger()
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredFormatter() if format_style == "structured" else logging.Formatter(SIMPLE_FORMAT))
    logger.addHandler(handler)
    for extra in extra_handlers:
        logger.addHandler(extra)
    logger.propagate = False
    return logger


def log_with_context(logger: logging.Logger, level: int, message: str, **extra_fields: Any) -> None:
    """Log ``message`` with ``extra_fields`` attached for the structured formatter."""
    if not logger.isEnabledFor(level):
        return
    logger.log(level, message, extra={"extra_fields": extra_fields}, stacklevel=2)


def log_statement(
    logger: logging.Logger, operation: str, sql: str, level: int = logging.DEBUG, **extra_fields: Any
) -> None:
    """Log that ``operation`` is running ``sql``.

    The message holds the SQL preview; ``operation`` and ``sql`` are also
    attached as structured fields.
    """
    if not logger.isEnabledFor(level):
        return
    preview = sql_preview(sql)
    fields = {"operation": operation, "sql": preview, **extra_fields}
    logger.log(level, "%s: %s", operation, preview, extra={"extra_fields": fields}, stacklevel=2)
