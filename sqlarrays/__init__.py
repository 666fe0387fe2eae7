"""sqlarrays: CRUD statements from plain mappings, with cached prepared statements."""

from sqlarrays import builder, core, dialects, driver, exceptions, typing, utils
from sqlarrays.__metadata__ import __version__
from sqlarrays.config import SyncDatabaseConfig
from sqlarrays.core.cache import CacheStats, StatementCache
from sqlarrays.core.metadata import EnumCache
from sqlarrays.core.result import QueryResult
from sqlarrays.core.statement import BuiltStatement, PreparedStatement
from sqlarrays.dialects import Dialect, MySQLDialect, SQLiteDialect, get_dialect
from sqlarrays.driver import ConnectionProtocol, SyncDriver
from sqlarrays.exceptions import (
    DatabaseConnectionError,
    ImproperConfigurationError,
    IntegrityError,
    InvalidInputError,
    InvalidStateError,
    MetadataUnavailableError,
    MissingParameterError,
    PrepareError,
    QueryFailedError,
    SQLArraysError,
)
from sqlarrays.typing import ALL_FIELDS, NO_FILTER, NO_ORDER, Sentinel

__all__ = (
    "ALL_FIELDS",
    "NO_FILTER",
    "NO_ORDER",
    "BuiltStatement",
    "CacheStats",
    "ConnectionProtocol",
    "DatabaseConnectionError",
    "Dialect",
    "EnumCache",
    "ImproperConfigurationError",
    "IntegrityError",
    "InvalidInputError",
    "InvalidStateError",
    "MetadataUnavailableError",
    "MissingParameterError",
    "MySQLDialect",
    "PrepareError",
    "PreparedStatement",
    "QueryFailedError",
    "QueryResult",
    "SQLArraysError",
    "SQLiteDialect",
    "Sentinel",
    "StatementCache",
    "SyncDatabaseConfig",
    "SyncDriver",
    "__version__",
    "builder",
    "core",
    "dialects",
    "driver",
    "exceptions",
    "get_dialect",
    "typing",
    "utils",
)
