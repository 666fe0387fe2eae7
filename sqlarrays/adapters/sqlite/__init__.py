from sqlarrays.adapters.sqlite.config import SqliteConfig, SqliteConnectionParams
from sqlarrays.adapters.sqlite.driver import SqliteConnection, SqliteExecResult, connect

__all__ = ("SqliteConfig", "SqliteConnection", "SqliteConnectionParams", "SqliteExecResult", "connect")
