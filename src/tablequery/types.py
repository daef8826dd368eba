"""
Bind type handling for query parameters.

This module provides:
- BindType: closed set of markers telling the driver how to serialize a value
- bind_type_for / bind_types_for: classify runtime values into markers
- coerce_bind_value: normalize a value according to its marker
- column_names: column names from a DB-API cursor description
"""
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any, Union

from tablequery.exceptions import ContractError

Scalar = Union[str, int, float, None]
Record = dict[str, Scalar]


class BindType(str, Enum):
    """Bind-type markers understood by the driver boundary."""
    STRING = 's'
    INTEGER = 'i'
    DOUBLE = 'd'


# Exact type lookup, so bool (an int subclass) is not bindable.
BIND_TYPES: dict[type, BindType] = {
    str: BindType.STRING,
    int: BindType.INTEGER,
    float: BindType.DOUBLE,
    type(None): BindType.STRING,
    }


def bind_type_for(value: Any) -> BindType:
    """Return the bind marker for a single value.

    >>> bind_type_for('x'), bind_type_for(1), bind_type_for(1.5), bind_type_for(None)
    (<BindType.STRING: 's'>, <BindType.INTEGER: 'i'>, <BindType.DOUBLE: 'd'>, <BindType.STRING: 's'>)

    Raises ContractError for anything outside str, int, float and None.
    """
    try:
        return BIND_TYPES[type(value)]
    except KeyError:
        raise ContractError(f"bind_type_for() '{type(value).__name__}' is invalid") from None


def bind_types_for(values: Iterable[Any]) -> list[BindType]:
    """Classify every value, in order."""
    return [bind_type_for(value) for value in values]


def marker_string(types: Sequence[BindType]) -> str:
    """Compact marker form, e.g. 'sid'."""
    return ''.join(t.value for t in types)


def coerce_bind_value(value: Any, bind_type: BindType) -> Scalar:
    """Normalize a value to the Python type its marker promises.

    None always passes through so the database receives NULL.
    """
    if value is None:
        return None
    if bind_type is BindType.INTEGER:
        return int(value)
    if bind_type is BindType.DOUBLE:
        return float(value)
    return str(value)


def column_names(description: Sequence[Sequence[Any]] | None) -> list[str]:
    """Extract column names from a DB-API cursor description."""
    if not description:
        return []
    return [desc[0] for desc in description]
