"""Clause and statement builders."""

from sqlarrays.builder.clauses import (
    build_field_list,
    build_order,
    build_params,
    build_set_clause,
    build_where,
    is_now_literal,
    placeholder_map,
)
from sqlarrays.builder.statements import (
    count_statement,
    delete_all_statement,
    delete_statement,
    insert_statement,
    select_statement,
    update_statement,
    upsert_statement,
)

__all__ = (
    "build_field_list",
    "build_order",
    "build_params",
    "build_set_clause",
    "build_where",
    "count_statement",
    "delete_all_statement",
    "delete_statement",
    "insert_statement",
    "is_now_literal",
    "placeholder_map",
    "select_statement",
    "update_statement",
    "upsert_statement",
)
