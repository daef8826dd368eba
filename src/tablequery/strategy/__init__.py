"""
Dialect lookup.

Strategies register themselves by drivername when their module is imported;
both built-in dialects are imported here so the registry is always populated.
"""
from functools import lru_cache

from tablequery.strategy.base import _STRATEGY_REGISTRY
from tablequery.strategy.base import DatabaseStrategy as DatabaseStrategy
from tablequery.strategy.base import register_strategy as register_strategy
from tablequery.strategy.postgres import PostgresStrategy as PostgresStrategy
from tablequery.strategy.sqlite import SQLiteStrategy as SQLiteStrategy


def get_strategy_class(dialect: str) -> type[DatabaseStrategy]:
    """Return the registered strategy class for a drivername.

    Raises ValueError naming the registered dialects when there is none.
    """
    try:
        return _STRATEGY_REGISTRY[dialect]
    except KeyError:
        raise ValueError(f'Unsupported dialect: {dialect}. '
                         f'Available: {get_available_dialects()}') from None


@lru_cache(maxsize=8)
def get_strategy(dialect: str) -> DatabaseStrategy:
    """Shared strategy instance for a drivername; strategies hold no state."""
    return get_strategy_class(dialect)()


def get_available_dialects() -> list[str]:
    return sorted(_STRATEGY_REGISTRY)


def is_supported_dialect(dialect: str) -> bool:
    return dialect in _STRATEGY_REGISTRY
