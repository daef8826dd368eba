"""
Database connection handling with SQLAlchemy.

This module provides:
1. The `connect()` function returning a ready `QueryBuilder`
2. URL and engine creation from `DatabaseOptions` via the dialect strategy

Each `connect()` opens exactly one connection. Engines use NullPool, so
closing the builder closes the real connection.
"""
import logging
from dataclasses import fields
from typing import Any

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool
from tablequery.client import QueryBuilder
from tablequery.driver import SqlAlchemyDriver
from tablequery.exceptions import ConnectionFailure, DbApiError, DbConnectionError
from tablequery.options import DatabaseOptions
from tablequery.strategy import get_strategy

__all__ = [
    'connect',
    'create_url_from_options',
    'create_engine_for_options',
]

logger = logging.getLogger(__name__)


def create_url_from_options(options: DatabaseOptions) -> sa.URL:
    """Convert DatabaseOptions to SQLAlchemy URL.
    """
    return get_strategy(options.drivername).build_connection_url(options)


def create_engine_for_options(options: DatabaseOptions, **kwargs: Any) -> Engine:
    """Create a non-pooling SQLAlchemy engine for the given options.
    """
    strategy = get_strategy(options.drivername)
    engine_kwargs: dict[str, Any] = {'echo': False, 'poolclass': NullPool}
    engine_kwargs.update(strategy.get_engine_kwargs(options))
    engine_kwargs.update(kwargs)

    engine = sa.create_engine(create_url_from_options(options), **engine_kwargs)
    logger.debug(f'Created new engine for {options.drivername}')
    return engine


def _load_options(options: DatabaseOptions | dict[str, Any] | None, **kw: Any) -> DatabaseOptions:
    """Build DatabaseOptions from an instance, a dict and/or keywords.

    Keywords override dict entries; an existing instance is used as-is.
    """
    if isinstance(options, DatabaseOptions):
        for field in fields(options):
            kw.pop(field.name, None)
        if kw:
            raise TypeError(f'Unexpected connect() arguments: {sorted(kw)}')
        return options
    return DatabaseOptions(**{**(options or {}), **kw})


def connect(options: DatabaseOptions | dict[str, Any] | None = None, **kw: Any) -> QueryBuilder:
    """Connect to a database and return a QueryBuilder bound to it.

    Args:
        options: Can be:
                - DatabaseOptions object
                - Dictionary of options
                - None, with options given as keyword arguments
        **kw: Keyword arguments to override options

    Raises
        ConnectionFailure: If the connection cannot be opened or the
            character set cannot be applied

    Returns
        QueryBuilder owning one open connection
    """
    options = _load_options(options, **kw)
    strategy = get_strategy(options.drivername)
    engine = create_engine_for_options(options)

    try:
        sa_connection = engine.connect()
    except (sa.exc.DBAPIError, *DbConnectionError) as err:
        engine.dispose()
        raise ConnectionFailure(f'Could not connect to {options.drivername} database '
                                f'{options.database!r}: {err}') from err

    try:
        strategy.configure_connection(sa_connection.connection, options)
    except (sa.exc.DBAPIError, ValueError, *DbApiError, *DbConnectionError) as err:
        sa_connection.close()
        engine.dispose()
        raise ConnectionFailure(f'Could not set charset {options.charset!r}: {err}') from err

    logger.debug(f'Connected to {options.drivername} database {options.database!r}')
    driver = SqlAlchemyDriver(sa_connection, strategy)
    return QueryBuilder(driver, data_loader=options.data_loader)
