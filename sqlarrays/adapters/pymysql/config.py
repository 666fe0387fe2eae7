"""PyMySQL database configuration."""

from typing import TYPE_CHECKING, Any, ClassVar, Optional, TypedDict

from sqlalchemy.engine import URL
from typing_extensions import NotRequired

from sqlarrays.adapters.pymysql.driver import PymysqlConnection, connect
from sqlarrays.config import SyncDatabaseConfig
from sqlarrays.exceptions import ImproperConfigurationError

if TYPE_CHECKING:
    from sqlarrays.core.cache import StatementCache
    from sqlarrays.core.metadata import EnumCache

__all__ = ("PymysqlConfig", "PymysqlConnectionParams")


class PymysqlConnectionParams(TypedDict, total=False):
    """PyMySQL connection parameters."""

    host: NotRequired[str]
    port: NotRequired[int]
    user: NotRequired[str]
    password: NotRequired[str]
    database: NotRequired[str]
    charset: NotRequired[str]
    connect_timeout: NotRequired[int]
    read_timeout: NotRequired[int]
    write_timeout: NotRequired[int]
    unix_socket: NotRequired[str]
    init_command: NotRequired[str]
    ssl: NotRequired["dict[str, Any]"]
    ssl_key_password: NotRequired[str]


class PymysqlConfig(SyncDatabaseConfig[PymysqlConnection]):
    """MySQL / MariaDB configuration backed by PyMySQL."""

    __slots__ = ()

    dialect_name: "ClassVar[str]" = "mysql"
    secret_keys: "ClassVar[tuple[str, ...]]" = ("password", "ssl_key_password")

    def __init__(
        self,
        *,
        connection_config: "Optional[PymysqlConnectionParams | dict[str, Any]]" = None,
        statement_cache: "Optional[StatementCache]" = None,
        enum_cache: "Optional[EnumCache]" = None,
    ) -> None:
        params = dict(connection_config or {})
        if "passwd" in params:
            params.setdefault("password", params.pop("passwd"))
        if "db" in params:
            params.setdefault("database", params.pop("db"))
        super().__init__(connection_config=params, statement_cache=statement_cache, enum_cache=enum_cache)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(url={self.url!r})"

    @property
    def url(self) -> str:
        """Connection URL with the password masked."""
        params = self.connection_config
        return URL.create(
            "mysql+pymysql",
            username=params.get("user"),
            password=params.get("password") or None,
            host=params.get("host"),
            port=params.get("port"),
            database=params.get("database"),
        ).render_as_string(hide_password=True)

    def create_connection(self) -> PymysqlConnection:
        if not self.connection_config.get("host") and not self.connection_config.get("unix_socket"):
            msg = "PymysqlConfig requires a 'host' or 'unix_socket' in connection_config"
            raise ImproperConfigurationError(msg)
        return connect(secrets=self.secrets, **self.connection_config)
