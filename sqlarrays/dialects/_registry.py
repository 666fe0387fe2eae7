from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sqlarrays.dialects._base import Dialect

__all__ = ("get_dialect", "list_registered_dialects", "register_dialect")


_DIALECTS: dict[str, "Dialect"] = {}
_DIALECTS_LOADED = False


def _load_default_dialects() -> None:
    """Register the built-in dialects."""
    global _DIALECTS_LOADED  # noqa: PLW0603
    if _DIALECTS_LOADED:
        return
    from sqlarrays.dialects.mysql import MySQLDialect
    from sqlarrays.dialects.sqlite import SQLiteDialect

    _DIALECTS.setdefault(MySQLDialect.name, MySQLDialect())
    _DIALECTS.setdefault("mariadb", _DIALECTS[MySQLDialect.name])
    _DIALECTS.setdefault(SQLiteDialect.name, SQLiteDialect())
    _DIALECTS_LOADED = True


def register_dialect(dialect: "Dialect") -> None:
    """Register a dialect instance under its ``name``.

    Args:
        dialect: Dialect to register; replaces any dialect with the same name.
    """
    _load_default_dialects()
    _DIALECTS[dialect.name] = dialect


def get_dialect(name: str) -> "Dialect":
    """Get a dialect by name.

    Raises:
        ValueError: When the dialect is unknown.
    """
    _load_default_dialects()
    if name not in _DIALECTS:
        msg = f"Unknown dialect: {name}. Available: {', '.join(sorted(_DIALECTS.keys()))}"
        raise ValueError(msg)
    return _DIALECTS[name]


def list_registered_dialects() -> "list[str]":
    """Return registered dialect names."""
    _load_default_dialects()
    return sorted(_DIALECTS.keys())
