"""Row cursor returned by select and raw queries."""

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlarrays.driver.protocols import ExecResultProtocol
    from sqlarrays.typing import Row

__all__ = ("QueryResult",)


class QueryResult:
    """Forward-only cursor over the rows of one execution.

    Each call to the executor gets its own result; results are never shared
    between calls even when the prepared statement is.
    """

    __slots__ = ("_exhausted", "_result", "sql")

    def __init__(self, sql: str, result: "ExecResultProtocol") -> None:
        self.sql = sql
        self._result = result
        self._exhausted = False

    @property
    def rows_affected(self) -> int:
        """Row count reported by the driver (-1 when unknown)."""
        return self._result.row_count()

    def fetch_one(self) -> "Optional[Row]":
        """Return the next row, or ``None`` once the rows are exhausted."""
        if self._exhausted:
            return None
        row = self._result.fetch_next()
        if row is None:
            self._exhausted = True
        return row

    def fetch_all(self) -> "list[Row]":
        """Return every remaining row."""
        return list(self)

    def first(self) -> "Optional[Row]":
        return self.fetch_one()

    def scalar(self) -> Any:
        """Return the first column of the next row, or ``None``."""
        row = self.fetch_one()
        if row is None:
            return None
        return next(iter(row.values()), None)

    def __iter__(self) -> "Iterator[Row]":
        while True:
            row = self.fetch_one()
            if row is None:
                return
            yield row

    def __repr__(self) -> str:
        return f"QueryResult(sql={self.sql!r}, rows_affected={self.rows_affected})"
