"""Synchronous query executor."""

import logging
from collections.abc import Generator, Iterable, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Optional

from sqlarrays.builder.statements import (
    count_statement,
    delete_all_statement,
    delete_statement,
    insert_statement,
    select_statement,
    update_statement,
    upsert_statement,
)
from sqlarrays.core.cache import get_default_statement_cache
from sqlarrays.core.metadata import get_default_enum_cache
from sqlarrays.core.result import QueryResult
from sqlarrays.core.statement import BuiltStatement
from sqlarrays.driver.transaction import TransactionCoordinator
from sqlarrays.exceptions import ImproperConfigurationError, InvalidInputError, PrepareError, QueryFailedError
from sqlarrays.typing import ALL_FIELDS, NO_FILTER, NO_ORDER
from sqlarrays.utils.logging import get_logger, log_statement, log_with_context

if TYPE_CHECKING:
    from sqlarrays.core.cache import StatementCache
    from sqlarrays.core.metadata import EnumCache
    from sqlarrays.core.statement import PreparedStatement
    from sqlarrays.dialects import Dialect
    from sqlarrays.driver.protocols import ConnectionProtocol, ExecResultProtocol
    from sqlarrays.typing import ConditionSet, FieldSpec, OrderSpec, Row, StatementParameters, ValueSet

__all__ = ("SyncDriver",)

logger = get_logger("driver")


class SyncDriver:
    """Builds statements from structured input and runs them on one connection.

    Prepared statements come from ``statement_cache`` and enum values from
    ``enum_cache``; both default to the process-wide instances and may be
    shared by drivers on other connections of the same dialect. The
    connection itself, and therefore any open transaction, belongs to this
    driver alone.
    """

    __slots__ = ("_transaction", "connection", "enum_cache", "statement_cache")

    def __init__(
        self,
        connection: "ConnectionProtocol",
        statement_cache: "Optional[StatementCache]" = None,
        enum_cache: "Optional[EnumCache]" = None,
    ) -> None:
        self.connection = connection
        self.statement_cache = statement_cache if statement_cache is not None else get_default_statement_cache()
        self.enum_cache = enum_cache if enum_cache is not None else get_default_enum_cache()
        self._transaction = TransactionCoordinator(connection)

    @property
    def dialect(self) -> "Dialect":
        return self.connection.dialect

    # Statement lifecycle: built -> prepared (cached) -> bound -> executed.

    def prepare(self, sql: str) -> "PreparedStatement":
        """Return the cached prepared statement for ``sql``, preparing it once."""
        prepared = self.statement_cache.get_or_prepare(sql, self.connection.prepare)
        if prepared.dialect is not None and prepared.dialect != self.dialect.name:
            msg = (
                f"Statement cache holds a {prepared.dialect!r} statement but this connection is "
                f"{self.dialect.name!r}; use one statement cache per dialect"
            )
            raise ImproperConfigurationError(msg)
        return prepared

    @contextmanager
    def _handle_execution_errors(self, operation: str, sql: str) -> "Generator[None, None, None]":
        try:
            yield
        except PrepareError:
            if self.statement_cache.discard(sql):
                log_statement(logger, "Evicted statement that failed to prepare", sql, logging.WARNING)
            raise
        except QueryFailedError as exc:
            logger.debug("%s failed: %s", operation, exc)
            raise type(exc)(f"{operation} failed: {exc.detail}") from exc

    def _execute(self, statement: BuiltStatement, operation: str) -> "ExecResultProtocol":
        with self._handle_execution_errors(operation, statement.sql):
            prepared = self.prepare(statement.sql)
            log_statement(logger, operation, statement.sql)
            return self.connection.execute(prepared, statement.parameters)

    def execute(self, statement: BuiltStatement, operation: str = "Query") -> QueryResult:
        """Run a built statement and return its row cursor."""
        return QueryResult(statement.sql, self._execute(statement, operation))

    # CRUD

    def select(
        self,
        table: str,
        where: "ConditionSet" = NO_FILTER,
        fields: "FieldSpec" = ALL_FIELDS,
        order: "OrderSpec" = NO_ORDER,
        offset: int = 0,
        limit: int = 0,
    ) -> QueryResult:
        """Select rows from ``table``.

        Args:
            table: Table to query.
            where: Condition set, or ``NO_FILTER`` for every row.
            fields: ``ALL_FIELDS``, a raw select-list string, or column names.
            order: ``NO_ORDER``, a column, a column to direction mapping, or columns.
            offset: Rows to skip; only applied together with a limit.
            limit: Maximum rows; ``0`` or negative applies no limit.

        Returns:
            A forward-only cursor over the selected rows.
        """
        statement = select_statement(table, self.dialect, where, fields, order, offset, limit)
        return self.execute(statement, "Select")

    def select_one(
        self, table: str, where: "ConditionSet" = NO_FILTER, fields: "FieldSpec" = ALL_FIELDS
    ) -> "Optional[Row]":
        """Return the first matching row, or ``None`` when nothing matches."""
        return self.select(table, where, fields).fetch_one()

    def insert(self, table: str, values: "ValueSet") -> "Optional[int]":
        """Insert one row and return the generated identifier."""
        self._execute(insert_statement(table, values, self.dialect), "Insert")
        return self.connection.last_insert_id()

    def update(self, table: str, values: "ValueSet", where: "ConditionSet") -> int:
        """Update matching rows and return the affected row count.

        A value equal to ``now()`` (any case) sets the column to the current
        database timestamp instead of the string.
        """
        return self._execute(update_statement(table, values, where, self.dialect), "Update").row_count()

    def delete(self, table: str, where: "ConditionSet") -> int:
        """Delete matching rows and return the affected row count.

        Raises:
            InvalidInputError: For ``NO_FILTER`` or empty conditions. Use
                ``delete_all`` to empty a table.
        """
        return self._execute(delete_statement(table, where, self.dialect), "Delete").row_count()

    def delete_all(self, table: str) -> int:
        """Delete every row of ``table``."""
        log_with_context(logger, logging.INFO, f"Deleting all rows from {table}", operation="delete_all", table=table)
        return self._execute(delete_all_statement(table, self.dialect), "Delete").row_count()

    def upsert(self, table: str, values: "ValueSet", where: "ConditionSet") -> "Optional[int]":
        """Insert the merged row, or overwrite the ``values`` columns when it already exists.

        The table needs a unique constraint over the ``where`` columns;
        without one the engine's own error is raised as ``QueryFailedError``
        (or a plain insert happens, depending on the engine).

        Returns:
            The id of the inserted or updated row where the dialect can
            return it, otherwise the driver's insert id (``None`` when the
            statement inserted nothing).
        """
        result = self.execute(upsert_statement(table, values, where, self.dialect), "Upsert")
        if not self.dialect.upsert_returning:
            return self.connection.last_insert_id()
        rows = result.fetch_all()
        return int(rows[0]["row_id"]) if rows else None

    def count(self, table: str, where: "ConditionSet" = NO_FILTER, field: str = "*") -> int:
        value = self.execute(count_statement(table, self.dialect, where, field), "Count").scalar()
        return int(value or 0)

    def run_raw(self, sql: str, params: "Optional[StatementParameters]" = None) -> QueryResult:
        """Run caller-written SQL through the statement cache.

        ``params`` keys may be written with or without the leading colon.
        """
        if not isinstance(sql, str) or not sql.strip():
            msg = "SQL text must be a non-empty string"
            raise InvalidInputError(msg)
        return self.execute(BuiltStatement(sql, dict(params or {})), "Query")

    def select_raw_one(self, sql: str, params: "Optional[StatementParameters]" = None) -> "Optional[Row]":
        """Run caller-written SQL and return its first row, or ``None``."""
        return self.run_raw(sql, params).fetch_one()

    # Helpers

    def get_rows_as_dict(
        self,
        table: str,
        key: str,
        where: "ConditionSet" = NO_FILTER,
        fields: "FieldSpec" = ALL_FIELDS,
    ) -> "dict[Any, Row]":
        """Select rows and index them by the value of column ``key``.

        Later rows with the same key replace earlier ones.
        """
        indexed: dict[Any, Row] = {}
        for row in self.select(table, where, fields):
            if key not in row:
                msg = f"Column {key!r} is not part of the selected fields"
                raise InvalidInputError(msg)
            indexed[row[key]] = row
        return indexed

    @staticmethod
    def build_values(keys: "Iterable[str]", source: "Mapping[str, Any]") -> "dict[str, Any]":
        """Pick ``keys`` out of ``source``, using ``""`` for missing keys."""
        return {key: source.get(key, "") for key in keys}

    def get_next_id(self, table: str) -> int:
        """Return the id the next insert into ``table`` is expected to receive."""
        return self.dialect.next_id(table, lambda sql, params: self.run_raw(sql, params).scalar())

    def get_db_time(self) -> int:
        """Return the database server's current time as a Unix timestamp."""
        return int(self.run_raw(self.dialect.current_time_query).scalar())

    # Metadata

    def _load_enum_descriptor(self, table: str, field: str) -> "Optional[str]":
        query = self.dialect.enum_descriptor_query
        if query is None:
            return None
        return self.run_raw(query, {"table": table, "field": field}).scalar()

    def get_enum_values(self, table: str, field: str) -> "tuple[str, ...]":
        """Return the permitted values of an ENUM column.

        Looked up once per ``(table, field)`` and then served from the enum
        cache. Columns that do not exist or are not enums give ``()``.

        Raises:
            MetadataUnavailableError: If the schema query fails.
        """
        return self.enum_cache.get_enum_values(table, field, self._load_enum_descriptor, self.dialect.name)

    # Transactions

    @property
    def in_transaction(self) -> bool:
        return self._transaction.in_transaction

    def begin(self) -> None:
        self._transaction.begin()

    def commit(self) -> None:
        self._transaction.commit()

    def rollback(self) -> None:
        self._transaction.rollback()

    @contextmanager
    def transaction(self) -> "Generator[SyncDriver, None, None]":
        """Run the block in a transaction; commit on success, roll back on error."""
        with self._transaction.transaction():
            yield self
