"""Full statement shapes built from the clause builder."""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Final

from sqlarrays.builder.clauses import (
    build_field_list,
    build_order,
    build_params,
    build_set_clause,
    build_where,
    is_now_literal,
    placeholder_map,
)
from sqlarrays.core.statement import BuiltStatement
from sqlarrays.exceptions import InvalidInputError
from sqlarrays.typing import ALL_FIELDS, NO_FILTER, NO_ORDER

if TYPE_CHECKING:
    from sqlarrays.dialects import Dialect
    from sqlarrays.typing import ConditionSet, FieldSpec, OrderSpec, ValueSet

__all__ = (
    "LIMIT_PARAMETER",
    "OFFSET_PARAMETER",
    "UPDATE_WHERE_PREFIX",
    "count_statement",
    "delete_all_statement",
    "delete_statement",
    "insert_statement",
    "select_statement",
    "update_statement",
    "upsert_statement",
)

LIMIT_PARAMETER: Final = "_limit"
OFFSET_PARAMETER: Final = "_offset"
UPDATE_WHERE_PREFIX: Final = "where_"


def _require_values(values: Any, what: str = "Values") -> "Mapping[str, Any]":
    if not isinstance(values, Mapping) or not values:
        msg = f"{what} must be a non-empty mapping"
        raise InvalidInputError(msg)
    return values


def _require_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{name} must be an integer, got {value!r}"
        raise InvalidInputError(msg)
    return value


def select_statement(
    table: str,
    dialect: "Dialect",
    where: "ConditionSet" = NO_FILTER,
    fields: "FieldSpec" = ALL_FIELDS,
    order: "OrderSpec" = NO_ORDER,
    offset: int = 0,
    limit: int = 0,
) -> BuiltStatement:
    """Build ``SELECT <fields> FROM <table> [WHERE] [ORDER BY] [LIMIT]``.

    The LIMIT clause is added only when ``limit > 0``; zero or a negative
    limit means no limit, never zero rows. ``offset`` is only used together
    with a limit.
    """
    offset = _require_int(offset, "offset")
    limit = _require_int(limit, "limit")
    sql = (
        f"SELECT {build_field_list(fields, dialect)} FROM {dialect.quote_identifier(table)}"
        f"{build_where(where, dialect)}{build_order(order, dialect)}"
    )
    parameters = build_params(where) or {}
    if limit > 0:
        if offset < 0:
            msg = f"offset must not be negative, got {offset}"
            raise InvalidInputError(msg)
        for name in (LIMIT_PARAMETER, OFFSET_PARAMETER):
            if f":{name}" in parameters:
                msg = f"Condition placeholder :{name} collides with the LIMIT clause"
                raise InvalidInputError(msg)
        sql += f" LIMIT :{LIMIT_PARAMETER} OFFSET :{OFFSET_PARAMETER}"
        parameters[f":{LIMIT_PARAMETER}"] = limit
        parameters[f":{OFFSET_PARAMETER}"] = offset
    return BuiltStatement(sql, parameters)


def count_statement(
    table: str, dialect: "Dialect", where: "ConditionSet" = NO_FILTER, field: str = "*"
) -> BuiltStatement:
    """Build ``SELECT COUNT(<field>) AS count FROM <table> [WHERE]``.

    ``field`` is ``"*"`` or a column name, which is quoted.
    """
    target = "*" if field == "*" else dialect.quote_identifier(field)
    sql = f"SELECT COUNT({target}) AS count FROM {dialect.quote_identifier(table)}{build_where(where, dialect)}"
    return BuiltStatement(sql, build_params(where) or {})


def insert_statement(table: str, values: "ValueSet", dialect: "Dialect") -> BuiltStatement:
    """Build ``INSERT INTO <table> (<columns>) VALUES (<placeholders>)``.

    Every value is bound, ``now()`` strings included.
    """
    mapping = _require_values(values)
    names = placeholder_map(list(mapping))
    columns = ", ".join(dialect.quote_identifier(column) for column in mapping)
    placeholders = ", ".join(f":{names[column]}" for column in mapping)
    sql = f"INSERT INTO {dialect.quote_identifier(table)} ({columns}) VALUES ({placeholders})"
    return BuiltStatement(sql, {f":{names[column]}": value for column, value in mapping.items()})


def update_statement(
    table: str, values: "ValueSet", where: "ConditionSet", dialect: "Dialect"
) -> BuiltStatement:
    """Build ``UPDATE <table> SET ... [WHERE]``.

    ``now()`` values are written as the dialect's timestamp literal and are
    not bound. When a column appears in both ``values`` and ``where`` the
    WHERE placeholders get the ``where_`` prefix so both values survive.
    """
    mapping = _require_values(values)
    set_names = placeholder_map(list(mapping))
    prefix = ""
    if isinstance(where, Mapping) and set(set_names.values()) & set(placeholder_map(list(where)).values()):
        prefix = UPDATE_WHERE_PREFIX
    set_clause = build_set_clause(mapping, dialect)
    where_clause = build_where(where, dialect, prefix)
    parameters = {f":{set_names[column]}": value for column, value in mapping.items() if not is_now_literal(value)}
    where_parameters = build_params(where, prefix) or {}
    collisions = set(parameters) & set(where_parameters)
    if collisions:
        msg = f"Placeholders {sorted(collisions)} are used by both the SET and WHERE clauses"
        raise InvalidInputError(msg)
    parameters.update(where_parameters)
    return BuiltStatement(f"UPDATE {dialect.quote_identifier(table)} SET {set_clause}{where_clause}", parameters)


def delete_statement(table: str, where: "ConditionSet", dialect: "Dialect") -> BuiltStatement:
    """Build ``DELETE FROM <table> WHERE ...``.

    Raises:
        InvalidInputError: For ``NO_FILTER`` or an empty condition set; use
            ``delete_all_statement`` to empty a table.
    """
    if where is NO_FILTER:
        msg = "delete requires conditions; use delete_all() to delete every row"
        raise InvalidInputError(msg)
    sql = f"DELETE FROM {dialect.quote_identifier(table)}{build_where(where, dialect)}"
    return BuiltStatement(sql, build_params(where) or {})


def delete_all_statement(table: str, dialect: "Dialect") -> BuiltStatement:
    return BuiltStatement(f"DELETE FROM {dialect.quote_identifier(table)}")


def upsert_statement(
    table: str, values: "ValueSet", where: "ConditionSet", dialect: "Dialect"
) -> BuiltStatement:
    """Build an INSERT that overwrites the ``values`` columns on conflict.

    ``values`` and ``where`` are merged into one row (``where`` wins on a
    shared column). The table must have a unique constraint covering the
    ``where`` columns; that is a precondition on the schema and is not
    checked here. Dialects with ``upsert_returning`` select the affected row id.
    """
    mapping = _require_values(values)
    if where is NO_FILTER:
        msg = "upsert requires conditions identifying the row"
        raise InvalidInputError(msg)
    conditions = _require_values(where, "Conditions")
    row = {**mapping, **conditions}
    inserted = insert_statement(table, row, dialect)
    sql = inserted.sql + dialect.upsert_clause(list(conditions), list(mapping)) + dialect.upsert_returning
    return BuiltStatement(sql, inserted.parameters)
