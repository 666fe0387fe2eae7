"""SQLite database configuration."""

import uuid
from typing import TYPE_CHECKING, Any, ClassVar, Optional, TypedDict

from typing_extensions import NotRequired

from sqlarrays.adapters.sqlite.driver import SqliteConnection, connect
from sqlarrays.config import SyncDatabaseConfig
from sqlarrays.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlarrays.core.cache import StatementCache
    from sqlarrays.core.metadata import EnumCache

__all__ = ("SqliteConfig", "SqliteConnectionParams")

logger = get_logger("adapters.sqlite.config")


class SqliteConnectionParams(TypedDict, total=False):
    """SQLite connection parameters."""

    database: NotRequired[str]
    timeout: NotRequired[float]
    detect_types: NotRequired[int]
    check_same_thread: NotRequired[bool]
    cached_statements: NotRequired[int]
    uri: NotRequired[bool]


class SqliteConfig(SyncDatabaseConfig[SqliteConnection]):
    """SQLite configuration.

    An in-memory database is turned into a named shared-cache URI so every
    session of this config sees the same data. The config keeps one
    connection open to hold that database alive until :meth:`close`.
    """

    __slots__ = ("_anchor",)

    dialect_name: "ClassVar[str]" = "sqlite"

    def __init__(
        self,
        *,
        connection_config: "Optional[SqliteConnectionParams | dict[str, Any]]" = None,
        statement_cache: "Optional[StatementCache]" = None,
        enum_cache: "Optional[EnumCache]" = None,
    ) -> None:
        params = dict(connection_config or {})
        database = str(params.get("database", ":memory:"))
        if database == ":memory:":
            params["database"] = f"file:memory_{uuid.uuid4().hex}?mode=memory&cache=shared"
            params["uri"] = True
        elif database.startswith("file:") and not params.get("uri"):
            logger.debug("Database URI detected (%s) but uri=True not set; enabling URI mode", database)
            params["uri"] = True
        params.setdefault("check_same_thread", False)
        super().__init__(connection_config=params, statement_cache=statement_cache, enum_cache=enum_cache)
        self._anchor: Optional[SqliteConnection] = None

    @property
    def is_memory(self) -> bool:
        return "mode=memory" in str(self.connection_config.get("database", ""))

    def create_connection(self) -> SqliteConnection:
        if self.is_memory and self._anchor is None:
            self._anchor = connect(**self.connection_config)
        return connect(**self.connection_config)

    def close(self) -> None:
        """Release the in-memory database, if one is held open."""
        if self._anchor is not None:
            self._anchor.close()
            self._anchor = None
