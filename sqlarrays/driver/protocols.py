"""Interface the executor needs from a database connection.

Adapters under ``sqlarrays.adapters`` implement it on top of a DB-API driver.
"""

from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlarrays.core.statement import PreparedStatement
    from sqlarrays.dialects import Dialect
    from sqlarrays.typing import Row

__all__ = ("ConnectionProtocol", "ExecResultProtocol")


@runtime_checkable
class ExecResultProtocol(Protocol):
    """Outcome of one execution: a row count and a forward-only row source."""

    def row_count(self) -> int:
        """Rows affected, or rows selected when the driver knows; -1 otherwise."""
        ...

    def fetch_next(self) -> "Optional[Row]":
        """Return the next row as a column-name keyed dict, or ``None`` at the end."""
        ...


@runtime_checkable
class ConnectionProtocol(Protocol):
    """A single open connection. Not safe for concurrent use."""

    @property
    def dialect(self) -> "Dialect": ...

    def quote_identifier(self, name: str) -> str: ...

    def prepare(self, sql: str) -> "PreparedStatement":
        """Compile ``sql`` into a connection-independent prepared statement.

        Raises:
            PrepareError: If the text cannot be prepared.
        """
        ...

    def execute(self, prepared: "PreparedStatement", parameters: "Optional[Mapping[str, Any]]") -> ExecResultProtocol:
        """Bind ``parameters`` and run ``prepared``.

        Raises:
            QueryFailedError: On an execution failure.
            PrepareError: If the engine rejects the statement text.
            DatabaseConnectionError: If the connection is unusable.
        """
        ...

    def last_insert_id(self) -> "Optional[int]": ...

    def begin_transaction(self) -> None: ...

    def commit(self) -> None: ...

    def roll_back(self) -> None: ...

    def close(self) -> None: ...
