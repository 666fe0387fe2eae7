"""Engine dialects: identifier quoting and engine-specific statement fragments."""

from sqlarrays.dialects._base import Dialect
from sqlarrays.dialects._registry import get_dialect, list_registered_dialects, register_dialect
from sqlarrays.dialects.mysql import MySQLDialect
from sqlarrays.dialects.sqlite import SQLiteDialect

__all__ = (
    "Dialect",
    "MySQLDialect",
    "SQLiteDialect",
    "get_dialect",
    "list_registered_dialects",
    "register_dialect",
)
