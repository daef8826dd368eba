"""
Base strategy interface for dialect-specific behavior.

A strategy knows how to reach a database (URL and engine kwargs), how to set
up a fresh connection (autocommit and character set) and which placeholder
style the DB-API driver expects. The query builder itself stays dialect
neutral and talks to the database only through the driver boundary.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from tablequery.sql import standardize_placeholders

if TYPE_CHECKING:
    from tablequery.options import DatabaseOptions

# Registry of dialect name -> strategy class
# Defined here to avoid circular imports (concrete strategies import from base)
_STRATEGY_REGISTRY: dict[str, type['DatabaseStrategy']] = {}


def register_strategy(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_strategy('postgresql')
        class PostgresStrategy(DatabaseStrategy):
            ...
    """
    def decorator(cls: type['DatabaseStrategy']) -> type['DatabaseStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


class DatabaseStrategy(ABC):
    """Base class for dialect-specific operations.
    """

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier."""

    @abstractmethod
    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL.

        Args:
            options: Connection options
        """

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return extra create_engine kwargs for this dialect."""
        return {}

    @abstractmethod
    def normalize_charset(self, charset: str) -> str:
        """Translate a charset name into the dialect's spelling.

        Raises
            ValueError: If the charset is not supported by the dialect
        """

    @abstractmethod
    def configure_connection(self, raw_conn: Any, options: 'DatabaseOptions') -> None:
        """Prepare a fresh DB-API connection: autocommit and character set.

        Args:
            raw_conn: The raw DB-API connection (not wrapped)
            options: Connection options carrying the charset
        """

    def standardize_sql(self, sql: str) -> str:
        """Rewrite ? / %s placeholders for this dialect's driver."""
        return standardize_placeholders(sql, dialect=self.dialect_name)

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return option fields that must be set for this dialect."""
        return ['database']

    @classmethod
    def validate_options(cls, options: 'DatabaseOptions') -> None:
        """Validate options for this dialect.

        Args:
            options: DatabaseOptions to validate

        Raises
            ValueError: If any required field is None or empty
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValueError(f'field {field} cannot be None or empty')
        if not options.charset:
            raise ValueError('field charset cannot be None or empty')
