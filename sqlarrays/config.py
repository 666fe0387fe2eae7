from abc import ABC, abstractmethod
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Optional, TypeVar

from sqlarrays.core.cache import StatementCache
from sqlarrays.core.metadata import EnumCache
from sqlarrays.driver._sync import SyncDriver
from sqlarrays.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlarrays.driver.protocols import ConnectionProtocol

__all__ = ("ConnectionT", "SyncDatabaseConfig")

ConnectionT = TypeVar("ConnectionT", bound="ConnectionProtocol")

logger = get_logger("config")


class SyncDatabaseConfig(ABC, Generic[ConnectionT]):
    """Base class for adapter configurations.

    A config knows how to open connections and owns the statement and enum
    caches every session it provides shares. Statements are compiled per
    dialect, so caches should not be shared between configs of different
    dialects.
    """

    __slots__ = ("connection_config", "enum_cache", "statement_cache")

    dialect_name: "ClassVar[str]"
    secret_keys: "ClassVar[tuple[str, ...]]" = ("password", "passwd")

    def __init__(
        self,
        *,
        connection_config: "Optional[dict[str, Any]]" = None,
        statement_cache: "Optional[StatementCache]" = None,
        enum_cache: "Optional[EnumCache]" = None,
    ) -> None:
        self.connection_config: dict[str, Any] = dict(connection_config or {})
        self.statement_cache = statement_cache if statement_cache is not None else StatementCache()
        self.enum_cache = enum_cache if enum_cache is not None else EnumCache()

    def __repr__(self) -> str:
        shown = {k: ("***" if k in self.secret_keys and v else v) for k, v in self.connection_config.items()}
        return f"{type(self).__name__}(connection_config={shown!r})"

    @property
    def secrets(self) -> "tuple[str, ...]":
        """Configured credential values, for redaction from error messages."""
        return tuple(str(self.connection_config[k]) for k in self.secret_keys if self.connection_config.get(k))

    @abstractmethod
    def create_connection(self) -> ConnectionT:
        """Create and return a new database connection.

        Raises:
            DatabaseConnectionError: If the connection cannot be established.
        """
        raise NotImplementedError

    @contextmanager
    def provide_connection(self) -> "Generator[ConnectionT, None, None]":
        """Provide a connection that is closed when the block exits."""
        connection = self.create_connection()
        try:
            yield connection
        finally:
            connection.close()

    @contextmanager
    def provide_session(self) -> "Generator[SyncDriver, None, None]":
        """Provide a driver on a fresh connection, sharing this config's caches."""
        with self.provide_connection() as connection:
            yield SyncDriver(connection, statement_cache=self.statement_cache, enum_cache=self.enum_cache)

    def clear_caches(self) -> None:
        """Empty the statement and enum caches."""
        self.statement_cache.clear()
        self.enum_cache.clear()
        logger.debug("Cleared caches for %s", type(self).__name__)
