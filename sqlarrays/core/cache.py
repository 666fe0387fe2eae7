"""Prepared statement cache.

Maps exact SQL text to a ``PreparedStatement``. Statement shapes come from
the caller's code paths rather than from data, so the set of keys stays small
and there is no eviction policy; entries are only removed explicitly
(``discard`` after a prepare failure, ``clear`` between tests).
"""

import threading
from typing import TYPE_CHECKING, Final, Optional

from mypy_extensions import mypyc_attr

from sqlarrays.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlarrays.core.statement import PreparedStatement

__all__ = (
    "CacheStats",
    "StatementCache",
    "get_default_statement_cache",
    "reset_default_caches",
)

logger = get_logger("core.cache")

CACHE_STATS_SLOTS: Final = ("hits", "misses", "total_operations")


@mypyc_attr(allow_interpreted_subclasses=False)
class CacheStats:
    """Cache statistics tracking."""

    __slots__ = CACHE_STATS_SLOTS

    def __init__(self) -> None:
        self.hits = 0
        self.misses = 0
        self.total_operations = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate as percentage."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0

    def record_hit(self) -> None:
        self.hits += 1
        self.total_operations += 1

    def record_miss(self) -> None:
        self.misses += 1
        self.total_operations += 1

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0
        self.total_operations = 0

    def __repr__(self) -> str:
        return f"CacheStats(hit_rate={self.hit_rate:.1f}%, hits={self.hits}, misses={self.misses})"


@mypyc_attr(allow_interpreted_subclasses=False)
class StatementCache:
    """Thread-safe get-or-prepare map from SQL text to prepared statement.

    One lock guards the whole check-then-insert sequence, so two threads
    asking for the same text never both run ``prepare``.
    """

    __slots__ = ("_lock", "_statements", "_stats")

    def __init__(self) -> None:
        self._statements: dict[str, PreparedStatement] = {}
        self._lock = threading.Lock()
        self._stats = CacheStats()

    def get(self, sql: str) -> "Optional[PreparedStatement]":
        with self._lock:
            return self._statements.get(sql)

    def get_or_prepare(self, sql: str, prepare: "Callable[[str], PreparedStatement]") -> "PreparedStatement":
        """Return the cached statement for ``sql``, preparing it on first use.

        Args:
            sql: Exact SQL text; parameter values are never part of the key.
            prepare: Called with ``sql`` on a miss. Errors propagate and
                nothing is stored.

        Returns:
            The shared prepared statement.
        """
        with self._lock:
            prepared = self._statements.get(sql)
            if prepared is not None:
                self._stats.record_hit()
                return prepared
            self._stats.record_miss()
            prepared = prepare(sql)
            self._statements[sql] = prepared
        logger.debug("Prepared statement cached (%d entries): %s", len(self._statements), sql)
        return prepared

    def discard(self, sql: str) -> bool:
        """Drop ``sql`` from the cache. Returns whether an entry was removed."""
        with self._lock:
            return self._statements.pop(sql, None) is not None

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            self._statements.clear()
            self._stats.reset()

    @property
    def stats(self) -> CacheStats:
        return self._stats

    def __contains__(self, sql: object) -> bool:
        with self._lock:
            return sql in self._statements

    def __len__(self) -> int:
        with self._lock:
            return len(self._statements)


_default_statement_cache: "Optional[StatementCache]" = None
_default_lock = threading.Lock()


def get_default_statement_cache() -> StatementCache:
    """Return the process-wide statement cache, creating it on first use."""
    global _default_statement_cache  # noqa: PLW0603
    with _default_lock:
        if _default_statement_cache is None:
            _default_statement_cache = StatementCache()
        return _default_statement_cache


def reset_default_caches() -> None:
    """Empty the process-wide statement and enum caches."""
    from sqlarrays.core.metadata import get_default_enum_cache

    get_default_statement_cache().clear()
    get_default_enum_cache().clear()
