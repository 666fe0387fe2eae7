"""Database adapters.

Each adapter wraps a DB-API driver in a connection that satisfies
:class:`sqlarrays.driver.ConnectionProtocol` and a config that opens it.
Adapters are imported on demand so their drivers stay optional at import time.
"""
