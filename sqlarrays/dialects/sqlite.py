"""SQLite dialect."""

from typing import TYPE_CHECKING, Any, ClassVar, Final, Optional

from sqlalchemy.dialects import sqlite

from sqlarrays.core.parameters import ParameterStyle
from sqlarrays.dialects._base import Dialect

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from sqlalchemy.engine.interfaces import Dialect as SQLAlchemyDialect

__all__ = ("SQLiteDialect",)

SEQUENCE_TABLE_QUERY: Final = "SELECT COUNT(*) FROM sqlite_master WHERE type = 'table' AND name = 'sqlite_sequence'"
SEQUENCE_NEXT_QUERY: Final = "SELECT seq + 1 AS next_id FROM sqlite_sequence WHERE name = :table"


class SQLiteDialect(Dialect):
    """SQLite has no ENUM type, so enum lookups resolve to no values without a query.

    Upserts return the rowid of the inserted or updated row through
    ``RETURNING``, which needs SQLite 3.35 or newer and a rowid table.
    """

    __slots__ = ()

    name: ClassVar[str] = "sqlite"
    parameter_style: ClassVar[ParameterStyle] = ParameterStyle.NAMED_COLON
    now_literal: ClassVar[str] = "CURRENT_TIMESTAMP"
    current_time_query: ClassVar[str] = "SELECT CAST(strftime('%s', 'now') AS INTEGER) AS the_time"
    enum_descriptor_query: ClassVar[Optional[str]] = None
    upsert_returning: ClassVar[str] = " RETURNING rowid AS row_id"

    def create_sqlalchemy_dialect(self) -> "SQLAlchemyDialect":
        return sqlite.dialect()

    def upsert_clause(self, conflict_columns: "Sequence[str]", update_columns: "Sequence[str]") -> str:
        target = ", ".join(self.quote_identifier(column) for column in conflict_columns)
        assignments = ", ".join(
            f"{quoted} = excluded.{quoted}" for quoted in (self.quote_identifier(c) for c in update_columns)
        )
        return f" ON CONFLICT ({target}) DO UPDATE SET {assignments}"

    def next_id_query(self, table: str) -> "tuple[str, dict[str, Any]]":
        return f"SELECT COALESCE(MAX(rowid), 0) + 1 AS next_id FROM {self.quote_identifier(table)}", {}

    def next_id(self, table: str, fetch_scalar: "Callable[[str, dict[str, Any]], Any]") -> int:
        """Return the next rowid of ``table``.

        ``AUTOINCREMENT`` tables never reuse ids, so their counter in
        ``sqlite_sequence`` wins over ``MAX(rowid)``. That table only exists
        once some ``AUTOINCREMENT`` table has been created.
        """
        if fetch_scalar(SEQUENCE_TABLE_QUERY, {}):
            sequence = fetch_scalar(SEQUENCE_NEXT_QUERY, {":table": table})
            if sequence is not None:
                return int(sequence)
        return super().next_id(table, fetch_scalar)
