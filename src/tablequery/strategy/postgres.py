"""
PostgreSQL-specific strategy implementation.

Connections go through SQLAlchemy's psycopg dialect. psycopg uses the %s
paramstyle, so ? placeholders are rewritten and bare % signs doubled before a
prepared statement is executed.
"""
import logging
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from tablequery.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from tablequery.options import DatabaseOptions

logger = logging.getLogger(__name__)

DEFAULT_PORT = 5432

# MySQL-style names are accepted so that the same settings work across servers
_CHARSET_ALIASES = {
    'utf8': 'UTF8',
    'utf-8': 'UTF8',
    'utf8mb4': 'UTF8',
    'latin1': 'LATIN1',
    'ascii': 'SQL_ASCII',
    }


@register_strategy('postgresql')
class PostgresStrategy(DatabaseStrategy):
    """PostgreSQL-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for PostgreSQL."""
        query = {}
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)

        return sa.URL.create(
            drivername='postgresql+psycopg',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port or DEFAULT_PORT,
            database=options.database,
            query=query,
        )

    def normalize_charset(self, charset: str) -> str:
        """Map a charset name onto a PostgreSQL client encoding.

        Unknown names are passed through upper-cased; the server rejects
        encodings it does not know when the connection is configured.
        """
        return _CHARSET_ALIASES.get(charset.lower(), charset.upper())

    def configure_connection(self, raw_conn: Any, options: 'DatabaseOptions') -> None:
        """Enable autocommit and set the client encoding.
        """
        if hasattr(raw_conn, 'driver_connection'):
            raw_conn = raw_conn.driver_connection
        raw_conn.autocommit = True

        encoding = self.normalize_charset(options.charset)
        with raw_conn.cursor() as cursor:
            cursor.execute("SELECT set_config('client_encoding', %s, false)", (encoding,))
        logger.debug(f'PostgreSQL client encoding set to {encoding}')

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for PostgreSQL connections."""
        return ['hostname', 'username', 'password', 'database']
