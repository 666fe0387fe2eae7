"""PyMySQL adapter helpers: exception mapping by MySQL error code and SQLSTATE."""

from typing import TYPE_CHECKING, Any, Final, Optional

from sqlarrays.exceptions import (
    DatabaseConnectionError,
    IntegrityError,
    PrepareError,
    QueryFailedError,
    redact_credentials,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlarrays.exceptions import SQLArraysError

__all__ = ("create_mapped_exception", "error_code_of")

MYSQL_ER_ACCESS_DENIED: Final = 1045
MYSQL_ER_BAD_DB: Final = 1049
MYSQL_ER_PARSE_ERROR: Final = 1064
MYSQL_ER_DUP_ENTRY: Final = 1062
MYSQL_ER_NO_DEFAULT_FOR_FIELD: Final = 1364
MYSQL_ER_CHECK_CONSTRAINT_VIOLATED: Final = 3819

CONNECTION_ERROR_CODES: Final = frozenset({MYSQL_ER_ACCESS_DENIED, MYSQL_ER_BAD_DB, 2002, 2003, 2005, 2006, 2013})
INTEGRITY_ERROR_CODES: Final = frozenset(
    {MYSQL_ER_DUP_ENTRY, 1048, 1216, 1217, 1451, 1452, MYSQL_ER_NO_DEFAULT_FOR_FIELD, MYSQL_ER_CHECK_CONSTRAINT_VIOLATED}
)
PARSE_ERROR_CODES: Final = frozenset({MYSQL_ER_PARSE_ERROR, 1149})


def error_code_of(error: BaseException) -> "Optional[int]":
    """Return the MySQL error number carried in ``error.args[0]``, if any."""
    args: Any = getattr(error, "args", ())
    if args and isinstance(args[0], int):
        return args[0]
    return None


def create_mapped_exception(
    error: BaseException, sql: "Optional[str]" = None, secrets: "Iterable[Optional[str]]" = ()
) -> "SQLArraysError":
    """Map a ``pymysql`` exception to the sqlarrays error taxonomy.

    Credentials listed in ``secrets`` are removed from the message.
    """
    code = error_code_of(error)
    sqlstate = getattr(error, "sqlstate", None)
    message = redact_credentials(str(error), secrets)

    if code in CONNECTION_ERROR_CODES or (sqlstate and sqlstate.startswith("08")):
        return DatabaseConnectionError(f"MySQL connection error [{code}]: {message}")
    if code in INTEGRITY_ERROR_CODES or (sqlstate and sqlstate.startswith("23")):
        return IntegrityError(f"MySQL integrity constraint violation [{code}]: {message}")
    if code in PARSE_ERROR_CODES:
        return PrepareError(f"MySQL could not prepare statement [{code}]: {message}", sql=sql)
    if code is None:
        return QueryFailedError(f"MySQL database error: {message}")
    return QueryFailedError(f"MySQL database error [{code}]: {message}")
