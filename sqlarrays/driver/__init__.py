"""Driver layer: connection protocol, executor and transactions."""

from sqlarrays.driver._sync import SyncDriver
from sqlarrays.driver.protocols import ConnectionProtocol, ExecResultProtocol
from sqlarrays.driver.transaction import TransactionCoordinator

__all__ = ("ConnectionProtocol", "ExecResultProtocol", "SyncDriver", "TransactionCoordinator")
