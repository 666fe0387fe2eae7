from __future__ import annotations

from collections.abc import Generator, Mapping
from pathlib import Path
from typing import Any

import pytest

from sqlarrays.adapters.sqlite import SqliteConfig
from sqlarrays.core.cache import StatementCache
from sqlarrays.core.metadata import EnumCache
from sqlarrays.core.parameters import convert_named_parameters, scan_parameters
from sqlarrays.core.statement import PreparedStatement
from sqlarrays.dialects import Dialect, MySQLDialect, SQLiteDialect, get_dialect
from sqlarrays.driver import SyncDriver

here = Path(__file__).parent
root_path = here.parent


class FakeExecResult:
    """Scripted rows and row count for one execution."""

    def __init__(self, rows: list[dict[str, Any]] | None = None, row_count: int = 0) -> None:
        self._rows = list(rows or [])
        self._row_count = row_count

    def row_count(self) -> int:
        return self._row_count

    def fetch_next(self) -> dict[str, Any] | None:
        if not self._rows:
            return None
        return self._rows.pop(0)


class FakeConnection:
    """In-process connection that records prepare/execute calls.

    ``results`` is consumed in order by ``execute``; when it runs out an empty
    result with ``row_count`` 1 is returned.
    """

    def __init__(self, dialect_name: str = "mysql", results: list[FakeExecResult] | None = None) -> None:
        self._dialect = get_dialect(dialect_name)
        self.results = list(results or [])
        self.prepared: list[str] = []
        self.executed: list[tuple[PreparedStatement, dict[str, Any]]] = []
        self.calls: list[str] = []
        self.insert_id: int | None = 42
        self.execute_error: Exception | None = None
        self.closed = False

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    def quote_identifier(self, name: str) -> str:
        return self._dialect.quote_identifier(name)

    def prepare(self, sql: str) -> PreparedStatement:
        self.prepared.append(sql)
        names = tuple(dict.fromkeys(info.name for info in scan_parameters(sql)))
        style = self._dialect.parameter_style
        return PreparedStatement(sql, convert_named_parameters(sql, style), names, style, self._dialect.name)

    def execute(self, prepared: PreparedStatement, parameters: Mapping[str, Any] | None) -> FakeExecResult:
        self.executed.append((prepared, dict(parameters or {})))
        if self.execute_error is not None:
            raise self.execute_error
        if self.results:
            return self.results.pop(0)
        return FakeExecResult(row_count=1)

    def last_insert_id(self) -> int | None:
        return self.insert_id

    def begin_transaction(self) -> None:
        self.calls.append("begin")

    def commit(self) -> None:
        self.calls.append("commit")

    def roll_back(self) -> None:
        self.calls.append("rollback")

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def mysql_dialect() -> MySQLDialect:
    return MySQLDialect()


@pytest.fixture
def sqlite_dialect() -> SQLiteDialect:
    return SQLiteDialect()


@pytest.fixture
def statement_cache() -> StatementCache:
    return StatementCache()


@pytest.fixture
def enum_cache() -> EnumCache:
    return EnumCache()


@pytest.fixture
def fake_connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def fake_driver(fake_connection: FakeConnection, statement_cache: StatementCache, enum_cache: EnumCache) -> SyncDriver:
    return SyncDriver(fake_connection, statement_cache=statement_cache, enum_cache=enum_cache)


@pytest.fixture
def sqlite_config() -> Generator[SqliteConfig, None, None]:
    config = SqliteConfig()
    yield config
    config.close()


@pytest.fixture
def sqlite_session(sqlite_config: SqliteConfig) -> Generator[SyncDriver, None, None]:
    """Driver on an in-memory database with ``users`` and ``settings`` tables."""
    with sqlite_config.provide_session() as driver:
        driver.run_raw(
            "CREATE TABLE users ("
            "id INTEGER PRIMARY KEY AUTOINCREMENT, "
            "name TEXT NOT NULL, "
            "email TEXT UNIQUE, "
            "status TEXT DEFAULT 'active', "
            "updated TEXT)"
        )
        driver.run_raw(
            "CREATE TABLE settings (id INTEGER PRIMARY KEY AUTOINCREMENT, "
            "owner TEXT NOT NULL, key TEXT NOT NULL, value TEXT, UNIQUE (owner, key))"
        )
        yield driver


