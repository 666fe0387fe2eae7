"""Clause builder: structured inputs to SQL fragments and parameter maps.

All functions are pure. Identifiers are always quoted through the dialect;
values always travel as ``:name`` parameters, with a single exception: a
value equal to ``now()`` (any case) is rendered as the dialect's current
timestamp literal. That rule matches that one token only and is applied by
``is_now_literal``; nothing else in a value is ever interpreted as SQL.
"""

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Final, Optional

from sqlarrays.core.parameters import placeholder_name
from sqlarrays.exceptions import InvalidInputError
from sqlarrays.typing import ALL_FIELDS, NO_FILTER, NO_ORDER, Sentinel

if TYPE_CHECKING:
    from sqlarrays.dialects import Dialect
    from sqlarrays.typing import ConditionSet, FieldSpec, OrderSpec, ValueSet

__all__ = (
    "NOW_TOKEN",
    "ORDER_DIRECTIONS",
    "build_field_list",
    "build_order",
    "build_params",
    "build_set_clause",
    "build_where",
    "is_now_literal",
    "placeholder_map",
)

NOW_TOKEN: Final = "now()"
ORDER_DIRECTIONS: Final = frozenset({"ASC", "DESC", ""})


def is_now_literal(value: Any) -> bool:
    """Return True if ``value`` is the ``now()`` literal passthrough token."""
    return isinstance(value, str) and value.lower() == NOW_TOKEN


def placeholder_map(columns: "Sequence[str]", prefix: str = "") -> "dict[str, str]":
    """Map each column to its placeholder name.

    Raises:
        InvalidInputError: On an empty column name, or when two columns
            collapse onto the same placeholder.
    """
    names: dict[str, str] = {}
    seen: dict[str, str] = {}
    for column in columns:
        if not isinstance(column, str) or not column:
            msg = "Raw SQL and empty keys are not allowed in a condition or value set"
            raise InvalidInputError(msg)
        name = f"{prefix}{placeholder_name(column)}"
        if name in seen:
            msg = f"Columns {seen[name]!r} and {column!r} map to the same placeholder :{name}"
            raise InvalidInputError(msg)
        seen[name] = column
        names[column] = name
    return names


def _require_condition_mapping(conditions: Any) -> "Mapping[str, Any]":
    if not isinstance(conditions, Mapping):
        msg = f"Conditions must be a mapping or NO_FILTER, got {type(conditions).__name__}"
        raise InvalidInputError(msg)
    if not conditions:
        msg = "Conditions must not be empty; pass NO_FILTER to match all rows"
        raise InvalidInputError(msg)
    return conditions


def build_where(conditions: "ConditionSet", dialect: "Dialect", prefix: str = "") -> str:
    """Build a WHERE clause joining one equality test per condition with AND.

    Args:
        conditions: Column to value mapping, or ``NO_FILTER``.
        dialect: Supplies identifier quoting and the ``now()`` literal.
        prefix: Prepended to every placeholder name.

    Returns:
        ``""`` for ``NO_FILTER``, else e.g. ``" WHERE status = :status"``.

    Raises:
        InvalidInputError: If ``conditions`` is neither ``NO_FILTER`` nor a
            non-empty mapping, or a key is empty.
    """
    if conditions is NO_FILTER:
        return ""
    mapping = _require_condition_mapping(conditions)
    names = placeholder_map(list(mapping), prefix)
    clauses = []
    for column, value in mapping.items():
        target = dialect.now_literal if is_now_literal(value) else f":{names[column]}"
        clauses.append(f"{dialect.quote_identifier(column)} = {target}")
    return " WHERE " + " AND ".join(clauses)


def build_params(conditions: "ConditionSet", prefix: str = "") -> "Optional[dict[str, Any]]":
    """Build the parameter map matching ``build_where``.

    Returns:
        ``None`` for ``NO_FILTER``; otherwise ``{":name": value}`` for every
        condition except ``now()`` literals.
    """
    if conditions is NO_FILTER:
        return None
    mapping = _require_condition_mapping(conditions)
    names = placeholder_map(list(mapping), prefix)
    return {f":{names[column]}": value for column, value in mapping.items() if not is_now_literal(value)}


def build_set_clause(values: "ValueSet", dialect: "Dialect") -> str:
    """Build the assignments of an UPDATE ... SET clause.

    Raises:
        InvalidInputError: If ``values`` is not a non-empty mapping.
    """
    if not isinstance(values, Mapping) or not values:
        msg = "Values must be a non-empty mapping"
        raise InvalidInputError(msg)
    names = placeholder_map(list(values))
    assignments = []
    for column, value in values.items():
        target = dialect.now_literal if is_now_literal(value) else f":{names[column]}"
        assignments.append(f"{dialect.quote_identifier(column)} = {target}")
    return ", ".join(assignments)


def _order_term(column: Any, direction: Any, dialect: "Dialect") -> str:
    if not isinstance(direction, str):
        msg = f"Invalid order direction {direction!r} for {column!r}"
        raise InvalidInputError(msg)
    normalized = direction.strip().upper()
    if normalized not in ORDER_DIRECTIONS:
        msg = f"Invalid order direction {direction!r} for {column!r}; expected ASC, DESC or empty"
        raise InvalidInputError(msg)
    quoted = dialect.quote_identifier(column)
    return f"{quoted} {normalized}" if normalized else quoted


def build_order(order: "OrderSpec", dialect: "Dialect") -> str:
    """Build an ORDER BY clause.

    ``NO_ORDER``, ``""`` and empty containers produce ``""``. A string orders
    by that one column. A mapping gives a direction per column (``""`` for
    the engine default); a sequence lists columns without directions.

    Raises:
        InvalidInputError: On an unknown direction or an unsupported shape.
    """
    if order is NO_ORDER or (isinstance(order, (str, Mapping, Sequence)) and not order):
        return ""
    if isinstance(order, str):
        return f" ORDER BY {dialect.quote_identifier(order)}"
    if isinstance(order, Mapping):
        terms = [_order_term(column, direction, dialect) for column, direction in order.items()]
    elif isinstance(order, Sequence):
        terms = [_order_term(column, "", dialect) for column in order]
    else:
        msg = f"Order must be a column name, mapping, sequence or NO_ORDER, got {type(order).__name__}"
        raise InvalidInputError(msg)
    return " ORDER BY " + ", ".join(terms)


def build_field_list(fields: "FieldSpec", dialect: "Dialect") -> str:
    """Build the select list.

    ``ALL_FIELDS`` gives ``*``. A string is caller-trusted and passed through
    verbatim (``"COUNT(*)"``, ``"id, name"``). A sequence is quoted column by
    column.

    Raises:
        InvalidInputError: For an empty sequence or any other shape.
    """
    if fields is ALL_FIELDS:
        return "*"
    if isinstance(fields, str):
        return fields
    if isinstance(fields, Sentinel):
        msg = f"{fields!r} is not a field specification"
        raise InvalidInputError(msg)
    if isinstance(fields, Sequence) and not isinstance(fields, (bytes, bytearray)) and fields:
        return ", ".join(dialect.quote_identifier(field) for field in fields)
    msg = f"Fields must be ALL_FIELDS, a string or a non-empty sequence of names, got {fields!r}"
    raise InvalidInputError(msg)
