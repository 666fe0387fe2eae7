from collections.abc import Iterable
from typing import Any, Optional

__all__ = (
    "DatabaseConnectionError",
    "ImproperConfigurationError",
    "IntegrityError",
    "InvalidInputError",
    "InvalidStateError",
    "MetadataUnavailableError",
    "MissingParameterError",
    "PrepareError",
    "QueryFailedError",
    "SQLArraysError",
    "redact_credentials",
)

REDACTED = "***"


class SQLArraysError(Exception):
    """Base exception class from which all sqlarrays exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLArraysError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class ImproperConfigurationError(SQLArraysError):
    """Improper Configuration error.

    Raised when a config object is missing a value it needs to open a connection.
    """


class InvalidInputError(SQLArraysError, ValueError):
    """A condition, field, order or value specification has an unsupported shape.

    Always a caller bug; never retried.
    """


class MissingParameterError(InvalidInputError):
    """A statement placeholder has no bound value."""

    sql: Optional[str]

    def __init__(self, message: str, sql: Optional[str] = None) -> None:
        detail_message = message
        if sql:
            detail_message = f"{message}\nSQL: {sql}"
        super().__init__(detail=detail_message)
        self.sql = sql


class InvalidStateError(SQLArraysError):
    """An operation was called in a state that does not allow it (e.g. nested ``begin``)."""


class DatabaseConnectionError(SQLArraysError):
    """The underlying connection could not be established or was lost."""


class PrepareError(SQLArraysError):
    """SQL text could not be prepared by the engine."""

    sql: Optional[str]

    def __init__(self, message: Optional[str] = None, sql: Optional[str] = None) -> None:
        if message is None:
            message = "Failed to prepare statement."
        detail_message = message
        if sql:
            detail_message = f"{message}\nSQL: {sql}"
        super().__init__(detail=detail_message)
        self.sql = sql


class QueryFailedError(SQLArraysError):
    """Execution-time failure reported by the engine."""


class IntegrityError(QueryFailedError):
    """Constraint violation (unique, foreign key, not-null, check)."""


class MetadataUnavailableError(SQLArraysError):
    """Schema introspection failed."""


def redact_credentials(message: str, secrets: "Iterable[Optional[str]]") -> str:
    """Replace every non-empty secret occurring in ``message``.

    Args:
        message: Text that may embed connection credentials.
        secrets: Values to hide (passwords, tokens). ``None`` and empty strings are ignored.

    Returns:
        The message with each secret replaced by ``***``.
    """
    for secret in secrets:
        if secret:
            message = message.replace(secret, REDACTED)
    return message
