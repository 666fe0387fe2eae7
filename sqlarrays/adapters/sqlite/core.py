"""SQLite adapter helpers: exception mapping and row collection."""

import sqlite3
from typing import TYPE_CHECKING, Any, Final, Optional

from sqlarrays.exceptions import (
    DatabaseConnectionError,
    IntegrityError,
    PrepareError,
    QueryFailedError,
    SQLArraysError,
)

if TYPE_CHECKING:
    from sqlarrays.typing import Row

__all__ = ("collect_row", "create_mapped_exception", "resolve_rowcount")

SQLITE_CONSTRAINT_CODE: Final = 19
SQLITE_CANTOPEN_CODE: Final = 14
SQLITE_NOTADB_CODE: Final = 26
SQLITE_BUSY_CODE: Final = 5
SQLITE_LOCKED_CODE: Final = 6

_SYNTAX_MARKERS: Final = ("syntax error", "incomplete input", "unrecognized token")


def _primary_code(error: BaseException) -> "Optional[int]":
    code = getattr(error, "sqlite_errorcode", None)
    if code is None:
        return None
    return int(code) & 0xFF


def create_mapped_exception(error: BaseException, sql: "Optional[str]" = None) -> SQLArraysError:
    """Map a ``sqlite3`` exception to the sqlarrays error taxonomy.

    Uses the extended result code when the interpreter exposes it and falls
    back to the exception class and message.
    """
    message = str(error)
    lowered = message.lower()
    code = _primary_code(error)

    if isinstance(error, sqlite3.IntegrityError) or code == SQLITE_CONSTRAINT_CODE:
        return IntegrityError(f"SQLite integrity constraint violation: {message}")
    if code in {SQLITE_CANTOPEN_CODE, SQLITE_NOTADB_CODE} or "unable to open" in lowered:
        return DatabaseConnectionError(f"SQLite connection error: {message}")
    if isinstance(error, sqlite3.ProgrammingError) and "closed" in lowered:
        return DatabaseConnectionError(f"SQLite connection error: {message}")
    if any(marker in lowered for marker in _SYNTAX_MARKERS):
        return PrepareError(f"SQLite could not prepare statement: {message}", sql=sql)
    if code in {SQLITE_BUSY_CODE, SQLITE_LOCKED_CODE}:
        return QueryFailedError(f"SQLite database locked: {message}")
    return QueryFailedError(f"SQLite database error: {message}")


def collect_row(cursor: "sqlite3.Cursor", values: "tuple[Any, ...]") -> "Row":
    columns = [column[0] for column in cursor.description or ()]
    return dict(zip(columns, values))


def resolve_rowcount(cursor: "sqlite3.Cursor") -> int:
    rowcount = getattr(cursor, "rowcount", -1)
    return rowcount if isinstance(rowcount, int) else -1
