"""Dialect base: identifier quoting and engine-specific statement fragments."""

from typing import TYPE_CHECKING, Any, ClassVar, Optional

from mypy_extensions import mypyc_attr

from sqlarrays.core.parameters import ParameterStyle
from sqlarrays.exceptions import InvalidInputError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from sqlalchemy.engine.interfaces import Dialect as SQLAlchemyDialect
    from sqlalchemy.sql.compiler import IdentifierPreparer

__all__ = ("Dialect",)


@mypyc_attr(allow_interpreted_subclasses=True)
class Dialect:
    """Engine-specific SQL knowledge used by the clause builder and executor.

    Identifier quoting is delegated to SQLAlchemy's identifier preparer for
    the engine, which quotes only names that need it (reserved words, mixed
    case, characters outside ``[a-z0-9_$]``) and escapes embedded quote
    characters.
    """

    __slots__ = ("_preparer",)

    name: ClassVar[str]
    parameter_style: ClassVar[ParameterStyle] = ParameterStyle.NAMED_COLON
    now_literal: ClassVar[str] = "NOW()"
    current_time_query: ClassVar[str] = "SELECT NOW() AS the_time"
    enum_descriptor_query: ClassVar[Optional[str]] = None
    upsert_returning: ClassVar[str] = ""

    def __init__(self) -> None:
        self._preparer: IdentifierPreparer = self.create_sqlalchemy_dialect().identifier_preparer

    def create_sqlalchemy_dialect(self) -> "SQLAlchemyDialect":
        raise NotImplementedError

    def quote_identifier(self, name: str) -> str:
        """Quote ``name`` for use as a table or column identifier.

        Raises:
            InvalidInputError: If ``name`` is empty or not a string.
        """
        if not isinstance(name, str) or not name:
            msg = f"Identifier must be a non-empty string, got {name!r}"
            raise InvalidInputError(msg)
        return self._preparer.quote(name)

    def upsert_clause(self, conflict_columns: "Sequence[str]", update_columns: "Sequence[str]") -> str:
        """Return the clause appended to an INSERT to overwrite ``update_columns`` on conflict."""
        raise NotImplementedError

    def next_id_query(self, table: str) -> "tuple[str, dict[str, Any]]":
        """Return SQL and parameters selecting the next auto-increment id of ``table``."""
        raise NotImplementedError

    def next_id(self, table: str, fetch_scalar: "Callable[[str, dict[str, Any]], Any]") -> int:
        """Return the next auto-increment id of ``table``.

        Args:
            table: Table name.
            fetch_scalar: Runs a query and returns the first column of its first row.
        """
        sql, params = self.next_id_query(table)
        return int(fetch_scalar(sql, params) or 0)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
