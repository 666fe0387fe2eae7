"""ENUM value cache and column type descriptor parsing."""

import csv
import re
import threading
from typing import TYPE_CHECKING, Final, Optional, Union

from mypy_extensions import mypyc_attr

from sqlarrays.exceptions import MetadataUnavailableError
from sqlarrays.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

__all__ = ("EnumCache", "get_default_enum_cache", "parse_enum_values")

logger = get_logger("core.metadata")

_ENUM_DESCRIPTOR: Final = re.compile(r"^\s*enum\s*\((?P<body>.*)\)\s*$", re.IGNORECASE | re.DOTALL)


def parse_enum_values(descriptor: "Optional[Union[str, bytes]]") -> "tuple[str, ...]":
    """Parse an ``enum('a','b','c')`` column type into its values.

    Values are split on commas outside single quotes; a doubled quote inside a
    value is an escaped quote. Surrounding whitespace is stripped from each
    value. Anything that is not an enum descriptor yields an empty tuple.

    Example:
        >>> parse_enum_values("enum('active','it''s',' spaced ')")
        ('active', "it's", 'spaced')
    """
    if descriptor is None:
        return ()
    if isinstance(descriptor, bytes):
        descriptor = descriptor.decode("utf-8")
    match = _ENUM_DESCRIPTOR.match(descriptor)
    if match is None:
        return ()
    body = match.group("body")
    if not body.strip():
        return ()
    row = next(csv.reader([body], delimiter=",", quotechar="'", skipinitialspace=True))
    return tuple(value.strip() for value in row)


@mypyc_attr(allow_interpreted_subclasses=False)
class EnumCache:
    """Lazily populated ``(dialect, table, column) -> enum values`` cache.

    Entries are keyed by dialect name as well, so drivers of different
    engines can share one cache. A column that is missing or not an enum is
    cached as an empty tuple so repeated lookups stay free. A failed lookup
    is not cached.
    """

    __slots__ = ("_lock", "_values")

    def __init__(self) -> None:
        self._values: dict[tuple[str, str, str], tuple[str, ...]] = {}
        self._lock = threading.Lock()

    def get_enum_values(
        self,
        table: str,
        field: str,
        loader: "Callable[[str, str], Optional[Union[str, bytes]]]",
        dialect: str = "",
    ) -> "tuple[str, ...]":
        """Return the permitted values of ``table.field``.

        Args:
            table: Table name.
            field: Column name.
            loader: Called on a miss; returns the raw column type descriptor
                or ``None`` when the column is absent or not an enum.
            dialect: Name of the dialect the loader queries.

        Raises:
            MetadataUnavailableError: If ``loader`` fails.
        """
        key = (dialect, table, field)
        with self._lock:
            cached = self._values.get(key)
            if cached is not None:
                return cached
            try:
                descriptor = loader(table, field)
            except Exception as exc:
                logger.error("Failed to get ENUM values for %s.%s: %s", table, field, exc)
                msg = f"Failed to get ENUM values for {table}.{field}"
                raise MetadataUnavailableError(msg) from exc
            values = parse_enum_values(descriptor)
            self._values[key] = values
        logger.debug("Cached %d ENUM values for %s.%s", len(values), table, field)
        return values

    def invalidate(self, table: str, field: "Optional[str]" = None, dialect: "Optional[str]" = None) -> None:
        """Forget cached values for one column, or for every column of ``table``.

        Entries of every dialect are dropped unless ``dialect`` is given.
        """
        with self._lock:
            stale = [
                key
                for key in self._values
                if key[1] == table and field in (None, key[2]) and dialect in (None, key[0])
            ]
            for key in stale:
                del self._values[key]

    def clear(self) -> None:
        with self._lock:
            self._values.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._values

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)


_default_enum_cache: "Optional[EnumCache]" = None
_default_lock = threading.Lock()


def get_default_enum_cache() -> EnumCache:
    """Return the process-wide enum cache, creating it on first use."""
    global _default_enum_cache  # noqa: PLW0603
    with _default_lock:
        if _default_enum_cache is None:
            _default_enum_cache = EnumCache()
        return _default_enum_cache
