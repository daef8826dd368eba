"""
SQLite-specific strategy implementation.

SQLite uses the ? paramstyle natively. The character set is applied with
PRAGMA encoding, which only takes effect before the database file is first
written; for an existing file the stored encoding wins.
"""
import logging
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from tablequery.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from tablequery.options import DatabaseOptions

logger = logging.getLogger(__name__)

_ENCODINGS = {
    'utf8': 'UTF-8',
    'utf-8': 'UTF-8',
    'utf8mb4': 'UTF-8',
    'utf16': 'UTF-16',
    'utf-16': 'UTF-16',
    'utf16le': 'UTF-16le',
    'utf-16le': 'UTF-16le',
    'utf16be': 'UTF-16be',
    'utf-16be': 'UTF-16be',
    }


@register_strategy('sqlite')
class SQLiteStrategy(DatabaseStrategy):
    """SQLite-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for SQLite."""
        return 'sqlite'

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for SQLite."""
        return sa.URL.create(drivername='sqlite', database=options.database)

    def normalize_charset(self, charset: str) -> str:
        """Map a charset name onto one of SQLite's four encodings.
        """
        try:
            return _ENCODINGS[charset.lower()]
        except KeyError:
            raise ValueError(f'Unsupported SQLite charset: {charset}') from None

    def configure_connection(self, raw_conn: Any, options: 'DatabaseOptions') -> None:
        """Enable autocommit and set the database encoding.
        """
        if hasattr(raw_conn, 'dbapi_connection'):
            raw_conn = raw_conn.dbapi_connection
        raw_conn.isolation_level = None

        encoding = self.normalize_charset(options.charset)
        raw_conn.execute(f"PRAGMA encoding = '{encoding}'")
        logger.debug(f'SQLite encoding set to {encoding}')
