"""PyMySQL connection implementing the executor's connection interface."""

from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Optional

import pymysql
import pymysql.cursors

from sqlarrays.adapters.pymysql.core import create_mapped_exception
from sqlarrays.core.parameters import ParameterStyle, bind_named_parameters, convert_named_parameters, scan_parameters
from sqlarrays.core.statement import PreparedStatement
from sqlarrays.dialects import get_dialect
from sqlarrays.exceptions import PrepareError
from sqlarrays.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from pymysql.connections import Connection
    from pymysql.cursors import DictCursor

    from sqlarrays.dialects import Dialect
    from sqlarrays.typing import Row

__all__ = ("PymysqlConnection", "PymysqlExecResult", "connect", "handle_database_exceptions")

logger = get_logger("adapters.pymysql")


@contextmanager
def handle_database_exceptions(
    sql: "Optional[str]" = None, secrets: "Iterable[Optional[str]]" = ()
) -> "Generator[None, None, None]":
    """Re-raise ``pymysql`` errors as sqlarrays exceptions."""
    try:
        yield
    except pymysql.err.Error as e:
        raise create_mapped_exception(e, sql, secrets) from e


class PymysqlExecResult:
    """Rows and row count of one ``DictCursor`` execution."""

    __slots__ = ("_cursor", "_done", "_row_count")

    def __init__(self, cursor: "DictCursor") -> None:
        self._cursor = cursor
        self._row_count = cursor.rowcount if isinstance(cursor.rowcount, int) else -1
        self._done = False

    def row_count(self) -> int:
        return self._row_count

    def fetch_next(self) -> "Optional[Row]":
        if self._done or self._cursor.description is None:
            return None
        row = self._cursor.fetchone()
        if row is None:
            self._done = True
            self._cursor.close()
            return None
        return dict(row)


class PymysqlConnection:
    """A PyMySQL connection in autocommit mode with explicit transactions.

    PyMySQL interpolates parameters on the client, so preparing converts the
    ``:name`` text to ``%(name)s`` once and keeps it in the statement. MySQL
    reports syntax errors when the statement runs; those surface as
    ``PrepareError``.
    """

    __slots__ = ("_connection", "_secrets")

    def __init__(self, connection: "Connection", secrets: "Iterable[Optional[str]]" = ()) -> None:
        self._connection = connection
        self._secrets = tuple(s for s in secrets if s)

    @property
    def dialect(self) -> "Dialect":
        return get_dialect("mysql")

    def quote_identifier(self, name: str) -> str:
        return self.dialect.quote_identifier(name)

    def prepare(self, sql: str) -> PreparedStatement:
        if not sql.strip():
            msg = "Cannot prepare an empty statement"
            raise PrepareError(msg, sql=sql)
        names = tuple(dict.fromkeys(info.name for info in scan_parameters(sql)))
        return PreparedStatement(
            sql=sql,
            driver_sql=convert_named_parameters(sql, ParameterStyle.NAMED_PYFORMAT),
            parameter_names=names,
            parameter_style=ParameterStyle.NAMED_PYFORMAT,
            dialect=self.dialect.name,
        )

    def execute(self, prepared: PreparedStatement, parameters: "Optional[Mapping[str, Any]]") -> PymysqlExecResult:
        # Always pass a mapping: PyMySQL only unescapes %% when it interpolates.
        bound = bind_named_parameters(prepared.parameter_names, parameters, prepared.sql)
        with handle_database_exceptions(prepared.sql, self._secrets):
            cursor = self._connection.cursor(pymysql.cursors.DictCursor)
            cursor.execute(prepared.driver_sql, bound)
        return PymysqlExecResult(cursor)

    def last_insert_id(self) -> "Optional[int]":
        return self._connection.insert_id() or None

    def begin_transaction(self) -> None:
        with handle_database_exceptions("BEGIN", self._secrets):
            self._connection.begin()

    def commit(self) -> None:
        with handle_database_exceptions("COMMIT", self._secrets):
            self._connection.commit()

    def roll_back(self) -> None:
        with handle_database_exceptions("ROLLBACK", self._secrets):
            self._connection.rollback()

    def close(self) -> None:
        if self._connection.open:
            self._connection.close()


def connect(
    host: str = "localhost",
    database: "Optional[str]" = None,
    user: "Optional[str]" = None,
    password: str = "",
    secrets: "Iterable[Optional[str]]" = (),
    **kwargs: Any,
) -> PymysqlConnection:
    """Open a MySQL connection.

    Args:
        host: Server host name.
        database: Schema to use.
        user: Login name.
        password: Login password; never included in raised errors.
        secrets: Further values to strip from error messages (other credentials from a config).
        **kwargs: Passed to :func:`pymysql.connect` (``port``, ``charset``, ...).

    Raises:
        DatabaseConnectionError: If the server cannot be reached or refuses the login.
    """
    kwargs.setdefault("charset", "utf8mb4")
    kwargs["autocommit"] = True
    hidden = (password, *secrets)
    with handle_database_exceptions(secrets=hidden):
        connection = pymysql.connect(host=host, user=user, password=password, database=database, **kwargs)
    logger.debug("Opened MySQL connection to %s/%s", host, database)
    return PymysqlConnection(connection, secrets=hidden)
