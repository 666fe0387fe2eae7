"""MySQL / MariaDB dialect."""

from typing import TYPE_CHECKING, Any, ClassVar, Optional

from sqlalchemy.dialects import mysql

from sqlarrays.core.parameters import ParameterStyle, placeholder_name
from sqlarrays.dialects._base import Dialect

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.engine.interfaces import Dialect as SQLAlchemyDialect

__all__ = ("MySQLDialect",)


class MySQLDialect(Dialect):
    __slots__ = ()

    name: ClassVar[str] = "mysql"
    parameter_style: ClassVar[ParameterStyle] = ParameterStyle.NAMED_PYFORMAT
    now_literal: ClassVar[str] = "NOW()"
    current_time_query: ClassVar[str] = "SELECT UNIX_TIMESTAMP(NOW()) AS the_time"
    enum_descriptor_query: ClassVar[Optional[str]] = (
        "SELECT COLUMN_TYPE FROM information_schema.COLUMNS "
        "WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = :table AND COLUMN_NAME = :field "
        "AND DATA_TYPE = 'enum'"
    )

    def create_sqlalchemy_dialect(self) -> "SQLAlchemyDialect":
        return mysql.dialect()

    def upsert_clause(self, conflict_columns: "Sequence[str]", update_columns: "Sequence[str]") -> str:
        # MySQL picks the conflicting key itself; conflict_columns only document the precondition.
        assignments = ", ".join(
            f"{self.quote_identifier(column)} = :{placeholder_name(column)}" for column in update_columns
        )
        return f" ON DUPLICATE KEY UPDATE {assignments}"

    def next_id_query(self, table: str) -> "tuple[str, dict[str, Any]]":
        sql = (
            "SELECT AUTO_INCREMENT AS next_id FROM information_schema.TABLES "
            "WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = :table"
        )
        return sql, {":table": table}
