from sqlarrays.adapters.pymysql.config import PymysqlConfig, PymysqlConnectionParams
from sqlarrays.adapters.pymysql.driver import PymysqlConnection, PymysqlExecResult, connect

__all__ = ("PymysqlConfig", "PymysqlConnection", "PymysqlConnectionParams", "PymysqlExecResult", "connect")
