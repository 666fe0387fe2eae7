"""Unit tests for the synchronous query executor.

This module tests the SyncDriver class including:
- Statement preparation through the shared cache
- CRUD operation results
- Error relabelling and cache eviction
- Enum lookups and helper queries
"""

import pytest

from sqlarrays.core.cache import StatementCache
from sqlarrays.core.metadata import EnumCache
from sqlarrays.driver import ConnectionProtocol, SyncDriver
from sqlarrays.exceptions import (
    ImproperConfigurationError,
    IntegrityError,
    InvalidInputError,
    MetadataUnavailableError,
    PrepareError,
    QueryFailedError,
)
from sqlarrays.typing import NO_FILTER
from tests.conftest import FakeConnection, FakeExecResult


# Initialization Tests
def test_fake_connection_satisfies_protocol(fake_connection: FakeConnection) -> None:
    assert isinstance(fake_connection, ConnectionProtocol)


def test_driver_defaults_to_global_caches(fake_connection: FakeConnection) -> None:
    from sqlarrays.core.cache import get_default_statement_cache
    from sqlarrays.core.metadata import get_default_enum_cache

    driver = SyncDriver(fake_connection)
    assert driver.statement_cache is get_default_statement_cache()
    assert driver.enum_cache is get_default_enum_cache()
    assert driver.dialect.name == "mysql"


# Statement Cache Tests
def test_same_statement_prepared_once(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_driver.select("users", {"id": 1})
    fake_driver.select("users", {"id": 2})

    assert fake_connection.prepared == ["SELECT * FROM users WHERE id = :id"]
    assert [params for _, params in fake_connection.executed] == [{":id": 1}, {":id": 2}]


def test_cache_shared_across_connections(statement_cache: StatementCache, enum_cache: EnumCache) -> None:
    first = FakeConnection()
    second = FakeConnection()
    SyncDriver(first, statement_cache, enum_cache).count("users")
    SyncDriver(second, statement_cache, enum_cache).count("users")

    assert len(first.prepared) == 1
    assert second.prepared == []
    assert second.executed[0][0] is first.executed[0][0]


def test_dialect_mismatch_is_a_configuration_error(statement_cache: StatementCache) -> None:
    SyncDriver(FakeConnection("mysql"), statement_cache).delete_all("users")
    sqlite_driver = SyncDriver(FakeConnection("sqlite"), statement_cache)

    with pytest.raises(ImproperConfigurationError, match="one statement cache per dialect"):
        sqlite_driver.delete_all("users")


def test_prepare_error_evicts_entry(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_connection.execute_error = PrepareError("syntax error")

    with pytest.raises(PrepareError):
        fake_driver.run_raw("SELEC 1")

    assert "SELEC 1" not in fake_driver.statement_cache


def test_prepare_rejects_positional_placeholders(fake_driver: SyncDriver) -> None:
    with pytest.raises(PrepareError):
        fake_driver.run_raw("SELECT * FROM users WHERE id = ?")
    assert len(fake_driver.statement_cache) == 0


# CRUD Tests
def test_select_returns_rows(fake_connection: FakeConnection, fake_driver: SyncDriver) -> None:
    fake_connection.results.append(FakeExecResult([{"id": 1}, {"id": 2}], row_count=2))

    result = fake_driver.select("users", NO_FILTER, order={"id": "ASC"}, limit=10)

    assert result.fetch_all() == [{"id": 1}, {"id": 2}]
    assert result.fetch_one() is None
    prepared, params = fake_connection.executed[0]
    assert prepared.sql == "SELECT * FROM users ORDER BY id ASC LIMIT :_limit OFFSET :_offset"
    assert prepared.driver_sql == "SELECT * FROM users ORDER BY id ASC LIMIT %(_limit)s OFFSET %(_offset)s"
    assert params == {":_limit": 10, ":_offset": 0}


def test_select_one(fake_connection: FakeConnection, fake_driver: SyncDriver) -> None:
    fake_connection.results.append(FakeExecResult([{"id": 5, "name": "Ada"}]))
    assert fake_driver.select_one("users", {"id": 5}) == {"id": 5, "name": "Ada"}

    fake_connection.results.append(FakeExecResult([]))
    assert fake_driver.select_one("users", {"id": 6}) is None


def test_insert_returns_last_insert_id(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_connection.insert_id = 17
    assert fake_driver.insert("users", {"name": "Ada"}) == 17


def test_update_returns_row_count(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_connection.results.append(FakeExecResult(row_count=3))

    assert fake_driver.update("users", {"status": "inactive", "updated": "NOW()"}, {"id": 1}) == 3

    prepared, params = fake_connection.executed[0]
    assert "updated = NOW()" in prepared.sql
    assert prepared.parameter_names == ("status", "id")
    assert params == {":status": "inactive", ":id": 1}


def test_delete_requires_conditions(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    with pytest.raises(InvalidInputError):
        fake_driver.delete("users", NO_FILTER)
    assert fake_connection.executed == []


def test_delete_all(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_connection.results.append(FakeExecResult(row_count=4))
    assert fake_driver.delete_all("users") == 4
    assert fake_connection.executed[0][0].sql == "DELETE FROM users"


def test_count(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_connection.results.append(FakeExecResult([{"count": 12}]))
    assert fake_driver.count("users", {"status": "active"}) == 12


def test_upsert(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_driver.upsert("settings", {"value": "dark"}, {"owner": "ada"})
    assert fake_connection.executed[0][0].sql.endswith("ON DUPLICATE KEY UPDATE value = :value")


def test_upsert_returns_affected_row_id(statement_cache: StatementCache, enum_cache: EnumCache) -> None:
    connection = FakeConnection("sqlite", [FakeExecResult([{"row_id": 5}], row_count=1)])
    connection.insert_id = 9
    driver = SyncDriver(connection, statement_cache, enum_cache)

    assert driver.upsert("settings", {"value": "dark"}, {"owner": "ada"}) == 5
    assert connection.executed[0][0].sql.endswith(" RETURNING rowid AS row_id")


# Error Handling Tests
def test_query_failure_is_relabelled(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    original = IntegrityError("Duplicate entry 'ada' for key 'email'")
    fake_connection.execute_error = original

    with pytest.raises(IntegrityError, match="Insert failed: Duplicate entry") as exc_info:
        fake_driver.insert("users", {"email": "ada"})

    assert exc_info.value.__cause__ is original
    assert "INSERT INTO users (email) VALUES (:email)" in fake_driver.statement_cache


def test_generic_query_failure(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_connection.execute_error = QueryFailedError("lock wait timeout")
    with pytest.raises(QueryFailedError, match="Update failed"):
        fake_driver.update("users", {"name": "x"}, {"id": 1})


def test_run_raw_rejects_empty_sql(fake_driver: SyncDriver) -> None:
    with pytest.raises(InvalidInputError):
        fake_driver.run_raw("   ")


def test_run_raw_accepts_bare_keys(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_connection.results.append(FakeExecResult([{"n": 1}]))
    assert fake_driver.select_raw_one("SELECT :n AS n", {"n": 1}) == {"n": 1}
    assert fake_connection.executed[0][1] == {"n": 1}


# Helper Tests
def test_get_rows_as_dict(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_connection.results.append(FakeExecResult([{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]))
    assert fake_driver.get_rows_as_dict("users", "id") == {1: {"id": 1, "name": "a"}, 2: {"id": 2, "name": "b"}}


def test_get_rows_as_dict_missing_key(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_connection.results.append(FakeExecResult([{"name": "a"}]))
    with pytest.raises(InvalidInputError, match="'id'"):
        fake_driver.get_rows_as_dict("users", "id", fields=["name"])


def test_build_values() -> None:
    assert SyncDriver.build_values(["a", "b"], {"a": 1, "c": 3}) == {"a": 1, "b": ""}


def test_get_next_id(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_connection.results.append(FakeExecResult([{"next_id": 8}]))
    assert fake_driver.get_next_id("users") == 8
    assert fake_connection.executed[0][1] == {":table": "users"}


def test_get_next_id_prefers_sqlite_sequence(statement_cache: StatementCache, enum_cache: EnumCache) -> None:
    results = [FakeExecResult([{"count": 1}]), FakeExecResult([{"next_id": 4}])]
    connection = FakeConnection("sqlite", results)
    driver = SyncDriver(connection, statement_cache, enum_cache)

    assert driver.get_next_id("users") == 4
    assert len(connection.executed) == 2
    assert "sqlite_sequence" in connection.executed[1][0].sql
    assert connection.executed[1][1] == {":table": "users"}


def test_get_next_id_without_sqlite_sequence(statement_cache: StatementCache, enum_cache: EnumCache) -> None:
    results = [FakeExecResult([{"count": 0}]), FakeExecResult([{"next_id": 3}])]
    connection = FakeConnection("sqlite", results)
    driver = SyncDriver(connection, statement_cache, enum_cache)

    assert driver.get_next_id("items") == 3
    assert connection.executed[1][0].sql == "SELECT COALESCE(MAX(rowid), 0) + 1 AS next_id FROM items"


def test_get_db_time(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_connection.results.append(FakeExecResult([{"the_time": 1700000000}]))
    assert fake_driver.get_db_time() == 1700000000
    assert fake_connection.executed[0][0].sql == "SELECT UNIX_TIMESTAMP(NOW()) AS the_time"


# Enum Tests
def test_get_enum_values_queries_once(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_connection.results.append(FakeExecResult([{"COLUMN_TYPE": "enum('active','inactive')"}]))

    assert fake_driver.get_enum_values("users", "status") == ("active", "inactive")
    assert fake_driver.get_enum_values("users", "status") == ("active", "inactive")

    assert len(fake_connection.executed) == 1
    assert fake_connection.executed[0][1] == {"table": "users", "field": "status"}


def test_get_enum_values_not_an_enum(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_connection.results.append(FakeExecResult([]))
    assert fake_driver.get_enum_values("users", "name") == ()
    assert fake_driver.get_enum_values("users", "name") == ()
    assert len(fake_connection.executed) == 1


def test_get_enum_values_failure(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    fake_connection.execute_error = QueryFailedError("information_schema unavailable")
    with pytest.raises(MetadataUnavailableError):
        fake_driver.get_enum_values("users", "status")
    assert ("mysql", "users", "status") not in fake_driver.enum_cache


def test_get_enum_values_without_enum_support(statement_cache: StatementCache, enum_cache: EnumCache) -> None:
    connection = FakeConnection("sqlite")
    driver = SyncDriver(connection, statement_cache, enum_cache)
    assert driver.get_enum_values("users", "status") == ()
    assert connection.executed == []


def test_enum_cache_shared_across_dialects(enum_cache: EnumCache) -> None:
    sqlite_driver = SyncDriver(FakeConnection("sqlite"), StatementCache(), enum_cache)
    mysql_connection = FakeConnection("mysql", [FakeExecResult([{"COLUMN_TYPE": "enum('on','off')"}])])
    mysql_driver = SyncDriver(mysql_connection, StatementCache(), enum_cache)

    assert sqlite_driver.get_enum_values("users", "status") == ()
    assert mysql_driver.get_enum_values("users", "status") == ("on", "off")

    assert len(mysql_connection.executed) == 1
    assert ("sqlite", "users", "status") in enum_cache
    assert ("mysql", "users", "status") in enum_cache


# Transaction Tests
def test_transaction_commits(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    with fake_driver.transaction() as session:
        assert session is fake_driver
        assert fake_driver.in_transaction
        fake_driver.insert("users", {"name": "a"})
    assert fake_connection.calls == ["begin", "commit"]
    assert not fake_driver.in_transaction


def test_transaction_rolls_back_on_error(fake_driver: SyncDriver, fake_connection: FakeConnection) -> None:
    with pytest.raises(RuntimeError), fake_driver.transaction():
        raise RuntimeError("boom")
    assert fake_connection.calls == ["begin", "rollback"]
