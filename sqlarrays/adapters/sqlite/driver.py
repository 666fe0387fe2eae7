"""SQLite connection implementing the executor's connection interface."""

import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Optional

from sqlarrays.adapters.sqlite.core import collect_row, create_mapped_exception, resolve_rowcount
from sqlarrays.core.parameters import ParameterStyle, bind_named_parameters, scan_parameters
from sqlarrays.core.statement import PreparedStatement
from sqlarrays.dialects import get_dialect
from sqlarrays.exceptions import PrepareError
from sqlarrays.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlarrays.dialects import Dialect
    from sqlarrays.typing import Row

__all__ = ("SqliteConnection", "SqliteExecResult", "connect", "handle_database_exceptions")

logger = get_logger("adapters.sqlite")


@contextmanager
def handle_database_exceptions(sql: "Optional[str]" = None) -> "Generator[None, None, None]":
    """Re-raise ``sqlite3`` errors as sqlarrays exceptions."""
    try:
        yield
    except sqlite3.Error as e:
        raise create_mapped_exception(e, sql) from e


class SqliteExecResult:
    """Rows and row count of one ``sqlite3`` cursor execution."""

    __slots__ = ("_cursor", "_done", "_row_count", "_sql")

    def __init__(self, cursor: "sqlite3.Cursor", sql: str) -> None:
        self._cursor = cursor
        self._sql = sql
        self._row_count = resolve_rowcount(cursor)
        self._done = False

    def row_count(self) -> int:
        return self._row_count

    def fetch_next(self) -> "Optional[Row]":
        if self._done or self._cursor.description is None:
            return None
        with handle_database_exceptions(self._sql):
            values = self._cursor.fetchone()
        if values is None:
            self._done = True
            self._cursor.close()
            return None
        return collect_row(self._cursor, values)


class SqliteConnection:
    """A ``sqlite3`` connection in autocommit mode with explicit transactions.

    ``sqlite3`` has no client-visible prepared statement handle; the module
    compiles and caches statements internally. Preparing here validates the
    placeholders and records their names, and engine syntax errors surface at
    execute time as ``PrepareError``.
    """

    __slots__ = ("_connection", "_last_insert_id")

    def __init__(self, connection: "sqlite3.Connection") -> None:
        self._connection = connection
        self._connection.isolation_level = None
        self._last_insert_id: Optional[int] = None

    @property
    def dialect(self) -> "Dialect":
        return get_dialect("sqlite")

    def quote_identifier(self, name: str) -> str:
        return self.dialect.quote_identifier(name)

    def prepare(self, sql: str) -> PreparedStatement:
        if not sql.strip():
            msg = "Cannot prepare an empty statement"
            raise PrepareError(msg, sql=sql)
        names = tuple(dict.fromkeys(info.name for info in scan_parameters(sql)))
        return PreparedStatement(
            sql=sql,
            driver_sql=sql,
            parameter_names=names,
            parameter_style=ParameterStyle.NAMED_COLON,
            dialect=self.dialect.name,
        )

    def execute(self, prepared: PreparedStatement, parameters: "Optional[Mapping[str, Any]]") -> SqliteExecResult:
        bound = bind_named_parameters(prepared.parameter_names, parameters, prepared.sql)
        with handle_database_exceptions(prepared.sql):
            cursor = self._connection.execute(prepared.driver_sql, bound)
        if cursor.lastrowid:
            self._last_insert_id = cursor.lastrowid
        return SqliteExecResult(cursor, prepared.sql)

    def last_insert_id(self) -> "Optional[int]":
        return self._last_insert_id

    def begin_transaction(self) -> None:
        with handle_database_exceptions("BEGIN"):
            self._connection.execute("BEGIN")

    def commit(self) -> None:
        with handle_database_exceptions("COMMIT"):
            self._connection.commit()

    def roll_back(self) -> None:
        with handle_database_exceptions("ROLLBACK"):
            self._connection.rollback()

    def close(self) -> None:
        self._connection.close()


def connect(database: str = ":memory:", **kwargs: Any) -> SqliteConnection:
    """Open a SQLite database.

    Args:
        database: Path, ``:memory:``, or a ``file:`` URI (pass ``uri=True``).
        **kwargs: Passed to :func:`sqlite3.connect`.

    Raises:
        DatabaseConnectionError: If the database cannot be opened.
    """
    kwargs.pop("isolation_level", None)
    with handle_database_exceptions():
        connection = sqlite3.connect(database, isolation_level=None, **kwargs)
    logger.debug("Opened SQLite database %s", database)
    return SqliteConnection(connection)
