"""Transaction coordination on a single connection."""

from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlarrays.exceptions import InvalidStateError
from sqlarrays.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlarrays.driver.protocols import ConnectionProtocol

__all__ = ("TransactionCoordinator",)

logger = get_logger("driver.transaction")


class TransactionCoordinator:
    """Pass-through to the connection's begin/commit/rollback.

    Tracks whether a transaction is open so nested ``begin`` calls and
    ``commit``/``rollback`` without ``begin`` fail instead of reaching the
    driver. It never rolls back on its own except inside ``transaction()``.
    """

    __slots__ = ("_active", "connection")

    def __init__(self, connection: "ConnectionProtocol") -> None:
        self.connection = connection
        self._active = False

    @property
    def in_transaction(self) -> bool:
        return self._active

    def begin(self) -> None:
        """Start a transaction.

        Raises:
            InvalidStateError: If a transaction is already open.
        """
        if self._active:
            msg = "A transaction is already in progress; nested transactions are not supported"
            raise InvalidStateError(msg)
        self.connection.begin_transaction()
        self._active = True
        logger.debug("Transaction started")

    def commit(self) -> None:
        if not self._active:
            msg = "No transaction in progress to commit"
            raise InvalidStateError(msg)
        self.connection.commit()
        self._active = False
        logger.debug("Transaction committed")

    def rollback(self) -> None:
        if not self._active:
            msg = "No transaction in progress to roll back"
            raise InvalidStateError(msg)
        try:
            self.connection.roll_back()
        finally:
            self._active = False
        logger.debug("Transaction rolled back")

    @contextmanager
    def transaction(self) -> "Generator[TransactionCoordinator, None, None]":
        """Run the block in a transaction.

        Commits when the block exits normally and rolls back when it raises,
        then re-raises. A commit failure also triggers a rollback.
        """
        self.begin()
        try:
            yield self
        except BaseException:
            if self._active:
                logger.debug("Rolling back transaction after error")
                self.rollback()
            raise
        if not self._active:
            return
        try:
            self.commit()
        except Exception:
            if self._active:
                self.rollback()
            raise
