"""
Filter and fetch option structures.

A filter is a trusted raw SQL condition plus the ordered values that fill its
positional placeholders. Only the values are bound as parameters; the
condition text is appended to the statement verbatim, so it must never carry
end-user input.
"""
from collections.abc import Iterable, Mapping, Sequence, Set
from dataclasses import dataclass, field, fields
from typing import Any

from tablequery.exceptions import ContractError
from tablequery.types import Scalar

__all__ = [
    'FilterSpec',
    'FetchOptions',
    'as_filter',
    'as_fetch_options',
    'where_clause',
    'where_values',
]


@dataclass(frozen=True)
class FilterSpec:
    """WHERE condition with its bind values.

    The number of values must match the placeholders in `condition`. This is
    left to the driver to enforce.
    """
    condition: str | None
    values: Sequence[Scalar] = field(default_factory=tuple)


@dataclass(frozen=True)
class FetchOptions:
    """Optional clauses for a SELECT.

    `offset` is only applied when `limit` is also set.
    """
    where: FilterSpec | Mapping[str, Any] | None = None
    order_by: str | None = None
    limit: int | None = None
    offset: int | None = None


def _from_mapping(cls: type, data: Mapping[str, Any], what: str) -> Any:
    allowed = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ContractError(f'Unknown {what} keys: {unknown}')
    return cls(**data)


def as_filter(where: FilterSpec | Mapping[str, Any]) -> FilterSpec:
    """Normalize a filter given as a FilterSpec or a plain mapping.

    Raises ContractError if the condition is missing.
    """
    if isinstance(where, Mapping):
        if 'condition' not in where:
            raise ContractError("'condition' parameter is required.")
        where = _from_mapping(FilterSpec, where, 'filter')
    if not isinstance(where, FilterSpec):
        raise ContractError(f'Expected a FilterSpec or mapping, got {type(where).__name__}')
    if where.condition is None:
        raise ContractError("'condition' parameter is required.")
    return where


def as_fetch_options(options: FetchOptions | Mapping[str, Any] | None) -> FetchOptions:
    """Normalize fetch options given as FetchOptions, a mapping or None."""
    if options is None:
        return FetchOptions()
    if isinstance(options, Mapping):
        return _from_mapping(FetchOptions, options, 'fetch option')
    if not isinstance(options, FetchOptions):
        raise ContractError(f'Expected FetchOptions or mapping, got {type(options).__name__}')
    return options


def where_clause(where: FilterSpec | Mapping[str, Any]) -> str:
    """Return ' WHERE <condition>' for a filter."""
    return ' WHERE ' + as_filter(where).condition


def where_values(where: FilterSpec | Mapping[str, Any]) -> list[Scalar]:
    """Return the filter's bind values, empty when none were given."""
    values = as_filter(where).values
    if not values:
        return []
    if isinstance(values, str | bytes | Mapping | Set) or not isinstance(values, Iterable):
        raise ContractError(f'Filter values must be an ordered sequence, got {type(values).__name__}')
    return list(values)
