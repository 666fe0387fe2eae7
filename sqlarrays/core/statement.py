"""Statement value types.

``BuiltStatement`` is what the clause builder produces: SQL text plus the
parameter mapping for its placeholders. ``PreparedStatement`` is what a
connection produces from that text and what the statement cache stores.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from mypy_extensions import mypyc_attr

from sqlarrays.core.parameters import ParameterStyle

__all__ = ("BuiltStatement", "PreparedStatement")


@mypyc_attr(allow_interpreted_subclasses=False)
@dataclass(frozen=True)
class BuiltStatement:
    """SQL text and the values bound to its ``:name`` placeholders.

    Parameter keys carry the leading colon (``":status"``). Literal
    passthroughs such as ``NOW()`` appear in ``sql`` and have no key.
    """

    sql: str
    parameters: "dict[str, Any]" = field(default_factory=dict)


@mypyc_attr(allow_interpreted_subclasses=False)
@dataclass(frozen=True)
class PreparedStatement:
    """A reusable compiled statement, keyed by its exact SQL text.

    The handle does not hold a connection or cursor, so one instance can be
    shared by every connection of the same dialect.

    Attributes:
        sql: The SQL text as built (``:name`` placeholders).
        driver_sql: The SQL text in the driver's parameter style.
        parameter_names: Placeholder names in first-occurrence order.
        parameter_style: Style of ``driver_sql``.
        dialect: Name of the dialect the statement was prepared for.
    """

    sql: str
    driver_sql: str
    parameter_names: "tuple[str, ...]" = ()
    parameter_style: ParameterStyle = ParameterStyle.NAMED_COLON
    dialect: Optional[str] = None
