"""Core statement processing: parameters, caches, results."""

from sqlarrays.core.cache import CacheStats, StatementCache, get_default_statement_cache, reset_default_caches
from sqlarrays.core.metadata import EnumCache, get_default_enum_cache, parse_enum_values
from sqlarrays.core.parameters import (
    ParameterInfo,
    ParameterStyle,
    bind_named_parameters,
    convert_named_parameters,
    scan_parameters,
)
from sqlarrays.core.result import QueryResult
from sqlarrays.core.statement import BuiltStatement, PreparedStatement

__all__ = (
    "BuiltStatement",
    "CacheStats",
    "EnumCache",
    "ParameterInfo",
    "ParameterStyle",
    "PreparedStatement",
    "QueryResult",
    "StatementCache",
    "bind_named_parameters",
    "convert_named_parameters",
    "get_default_enum_cache",
    "get_default_statement_cache",
    "parse_enum_values",
    "reset_default_caches",
    "scan_parameters",
)
