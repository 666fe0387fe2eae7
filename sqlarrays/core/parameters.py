"""Placeholder scanning and named parameter style conversion.

Statements are always built with ``:name`` placeholders. Drivers that use a
different paramstyle convert the text once, at prepare time, so the converted
form can live in the statement cache next to the original text.
"""

import re
from enum import Enum
from typing import TYPE_CHECKING, Any, Final, NamedTuple

from sqlarrays.exceptions import InvalidInputError, MissingParameterError, PrepareError

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = (
    "ParameterInfo",
    "ParameterStyle",
    "bind_named_parameters",
    "convert_named_parameters",
    "placeholder_name",
    "scan_parameters",
)


_PARAMETER_REGEX: Final = re.compile(
    r"""
    (?P<dquote>"(?:[^"\\]|\\.)*") |
    (?P<squote>'(?:[^'\\]|\\.)*') |
    (?P<backtick>`(?:[^`]|``)*`) |
    (?P<line_comment>--[^\r\n]*) |
    (?P<block_comment>/\*(?:[^*]|\*(?!/))*\*/) |
    (?P<pyformat_named>%\((?P<pyformat_name>\w+)\)s) |
    (?P<pyformat_pos>%s) |
    (?P<named_colon>:(?P<colon_name>[A-Za-z_]\w*)) |
    (?P<qmark>\?) |
    (?P<percent>%)
    """,
    re.VERBOSE | re.MULTILINE | re.DOTALL,
)

_SKIP_GROUPS: Final = ("dquote", "squote", "backtick", "line_comment", "block_comment")


_UNSAFE_PLACEHOLDER_CHARS: Final = re.compile(r"[^a-zA-Z0-9_]")


def placeholder_name(key: str) -> str:
    """Derive a placeholder name from a column name.

    Every character outside ``[A-Za-z0-9_]`` is stripped so a column name can
    never inject text into the placeholder position. A leading digit gets an
    underscore prefix.

    Raises:
        InvalidInputError: If nothing is left after stripping.
    """
    name = _UNSAFE_PLACEHOLDER_CHARS.sub("", key)
    if not name:
        msg = f"Column name {key!r} does not yield a usable placeholder name"
        raise InvalidInputError(msg)
    if name[0].isdigit():
        name = f"_{name}"
    return name


class ParameterStyle(str, Enum):
    """Named parameter styles understood by the bundled drivers.

    - NAMED_COLON: :name placeholders (sqlite3)
    - NAMED_PYFORMAT: %(name)s placeholders (pymysql)
    """

    NAMED_COLON = "named_colon"
    NAMED_PYFORMAT = "pyformat_named"


class ParameterInfo(NamedTuple):
    """A ``:name`` placeholder found in SQL text."""

    name: str
    position: int
    placeholder_text: str


def scan_parameters(sql: str) -> "list[ParameterInfo]":
    """Return the ``:name`` placeholders in ``sql``, in textual order.

    Quoted strings, quoted identifiers and comments are skipped.

    Raises:
        PrepareError: If the text uses positional or pyformat placeholders,
            which cannot be bound from a named parameter mapping.
    """
    parameters: list[ParameterInfo] = []
    for match in _PARAMETER_REGEX.finditer(sql):
        if any(match.group(g) for g in _SKIP_GROUPS) or match.group("percent"):
            continue
        if match.group("named_colon"):
            parameters.append(ParameterInfo(match.group("colon_name"), match.start(), match.group(0)))
            continue
        msg = f"Unsupported placeholder {match.group(0)!r}; use :name placeholders"
        raise PrepareError(msg, sql=sql)
    return parameters


def convert_named_parameters(sql: str, style: ParameterStyle) -> str:
    """Rewrite ``:name`` placeholders into ``style``.

    For pyformat output every literal ``%`` is doubled, quoted text included,
    because the driver interpolates the whole statement with ``%``.
    """
    if style is ParameterStyle.NAMED_COLON:
        return sql

    def _replace(match: "re.Match[str]") -> str:
        if any(match.group(g) for g in _SKIP_GROUPS):
            return match.group(0).replace("%", "%%")
        if match.group("named_colon"):
            return f"%({match.group('colon_name')})s"
        if match.group("percent"):
            return "%%"
        return match.group(0)

    return _PARAMETER_REGEX.sub(_replace, sql)


def bind_named_parameters(
    names: "tuple[str, ...]", parameters: "Mapping[str, Any] | None", sql: str = ""
) -> "dict[str, Any]":
    """Resolve driver parameters for the placeholder ``names``.

    Keys may be given with or without the leading colon. Keys that no
    placeholder uses are dropped.

    Raises:
        MissingParameterError: If a placeholder has no value.
    """
    supplied = {key.lstrip(":"): value for key, value in (parameters or {}).items()}
    bound: dict[str, Any] = {}
    for name in names:
        if name not in supplied:
            msg = f"Missing value for placeholder :{name}"
            raise MissingParameterError(msg, sql=sql or None)
        bound[name] = supplied[name]
    return bound
