"""
Query builder facade.

`QueryBuilder` turns structured descriptions into parameterized statements and
runs them through a `Driver`:

- fetch(table, columns, options) - SELECT with optional WHERE/ORDER BY/LIMIT/OFFSET
- fetch_one(table, columns, where) - first matching row or {}
- count(table, where) - SELECT COUNT(*)
- insert(table, values) - INSERT one row
- update(table, values, where) - UPDATE, SET values bound before WHERE values
- delete(table, where) - DELETE, all rows when where is None

Trust boundary: table names, column names, `order_by` and filter conditions
are inserted into the SQL text as given. Only values are bound as parameters,
so only values may come from untrusted input.
"""
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Self

from tablequery.driver import Driver, Result
from tablequery.filters import FetchOptions, FilterSpec
from tablequery.options import iterdict_data_loader
from tablequery.sql import build_count, build_delete, build_insert
from tablequery.sql import build_select, build_update, count_placeholders
from tablequery.types import Record, Scalar, bind_types_for

__all__ = ['QueryBuilder']

logger = logging.getLogger(__name__)

Where = FilterSpec | Mapping[str, Any]


class QueryBuilder:
    """Structured CRUD over one database connection.

    Holds a single driver handle for its whole life and issues exactly one
    statement per call. Not safe to share across threads without external
    locking.
    """

    def __init__(self, driver: Driver,
                 data_loader: Callable[..., Any] | None = None) -> None:
        """Wrap an open driver.

        Parameters
            driver: Object implementing the `Driver` protocol
            data_loader: Shapes fetch() results, defaults to a list of dicts
        """
        self.driver = driver
        self.data_loader = data_loader or iterdict_data_loader

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying connection."""
        self.driver.close()

    def _execute(self, sql: str, values: Sequence[Scalar]) -> Result:
        """Classify, prepare, bind and execute.

        Values are classified before the driver sees anything so an
        unbindable value never reaches the database.
        """
        types = bind_types_for(values)
        placeholders = count_placeholders(sql)
        if placeholders != len(values):
            logger.debug(f'Statement has {placeholders} placeholders but {len(values)} values: {sql}')
        stmt = self.driver.prepare(sql)
        stmt = self.driver.bind(stmt, values, types)
        return self.driver.execute(stmt)

    def fetch(self, table: str, columns: Sequence[str],
              options: FetchOptions | Mapping[str, Any] | None = None) -> Any:
        """Select rows from a table.

        Parameters
            table: Table name, trusted
            columns: Column names or expressions, trusted
            options: FetchOptions or a mapping with `where`, `order_by`,
                `limit` and `offset`

        Returns
            All matching rows through the data loader, a list of dicts by
            default; empty when nothing matches
        """
        sql, values = build_select(table, columns, options)
        result = self._execute(sql, values)
        records = self.driver.fetch_all(result)
        logger.debug(f'fetch from {table} returned {len(records)} rows')
        return self.data_loader(records, result.columns)

    def fetch_one(self, table: str, columns: Sequence[str], where: Where | None) -> Record:
        """Return the first matching row, or an empty dict when there is none.
        """
        sql, values = build_select(table, columns, FetchOptions(where=where, limit=1))
        result = self._execute(sql, values)
        records = self.driver.fetch_all(result)
        if not records:
            return {}
        return records[0]

    def count(self, table: str, where: Where | None = None) -> int:
        """Count rows, optionally filtered.

        Without a filter the statement runs unparameterized.
        """
        sql, values = build_count(table, where)
        if values is None:
            result = self.driver.query(sql)
        else:
            result = self._execute(sql, values)
        return int(self.driver.fetch_scalar(result))

    def insert(self, table: str, values: Mapping[str, Scalar]) -> None:
        """Insert one row; columns and placeholders follow the mapping order.
        """
        sql, params = build_insert(table, values)
        self._execute(sql, params)

    def update(self, table: str, values: Mapping[str, Scalar], where: Where | None) -> None:
        """Update rows. Passing where=None updates every row.
        """
        sql, params = build_update(table, values, where)
        self._execute(sql, params)

    def delete(self, table: str, where: Where | None) -> None:
        """Delete rows.

        where=None deletes every row through the unparameterized path. It
        has no default so that deleting everything is always explicit.
        """
        sql, values = build_delete(table, where)
        if values is None:
            logger.debug(f'Deleting all rows from {table}')
            self.driver.query(sql)
        else:
            self._execute(sql, values)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.driver!r})'
