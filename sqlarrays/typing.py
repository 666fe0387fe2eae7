"""Input shapes accepted by the clause builder.

Each clause input is a tagged variant: a sentinel that omits the clause, a raw
string, a sequence, or a mapping. The sentinels are members of one enum so
they can never be confused with user data.
"""

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Final, Literal, Union

from typing_extensions import TypeAlias

__all__ = (
    "ALL_FIELDS",
    "NO_FILTER",
    "NO_ORDER",
    "ConditionSet",
    "FieldSpec",
    "OrderDirection",
    "OrderSpec",
    "Row",
    "Sentinel",
    "StatementParameters",
    "ValueSet",
)


class Sentinel(Enum):
    """Distinguished values meaning "omit this clause entirely"."""

    NO_FILTER = "NO_FILTER"
    ALL_FIELDS = "ALL_FIELDS"
    NO_ORDER = "NO_ORDER"

    def __repr__(self) -> str:
        return self.value


NO_FILTER: Final = Sentinel.NO_FILTER
ALL_FIELDS: Final = Sentinel.ALL_FIELDS
NO_ORDER: Final = Sentinel.NO_ORDER

OrderDirection: TypeAlias = Literal["ASC", "DESC", ""]

ValueSet: TypeAlias = Mapping[str, Any]
ConditionSet: TypeAlias = Union[Mapping[str, Any], Literal[Sentinel.NO_FILTER]]
FieldSpec: TypeAlias = Union[str, Sequence[str], Literal[Sentinel.ALL_FIELDS]]
OrderSpec: TypeAlias = Union[str, Mapping[str, str], Sequence[str], Literal[Sentinel.NO_ORDER]]
StatementParameters: TypeAlias = Mapping[str, Any]
Row: TypeAlias = dict[str, Any]
