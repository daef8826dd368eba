"""
Database driver boundary.

The query builder talks to the database only through the `Driver` protocol:

    prepare(sql)                   -> PreparedStatement
    bind(stmt, values, types)      -> PreparedStatement
    execute(stmt)                  -> Result
    query(sql)                     -> Result   (unparameterized)
    fetch_all(result)              -> list of records
    fetch_scalar(result)           -> first column of the first row

`SqlAlchemyDriver` implements it over one SQLAlchemy connection, executing
through raw DB-API cursors. Driver errors are logged and re-raised unchanged.
"""
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from functools import wraps
from typing import Any, Protocol, runtime_checkable

import sqlalchemy as sa
from tablequery.exceptions import ConnectionFailure, QueryError
from tablequery.strategy import DatabaseStrategy
from tablequery.types import BindType, Record, Scalar, coerce_bind_value
from tablequery.types import column_names, marker_string

__all__ = [
    'Driver',
    'PreparedStatement',
    'Result',
    'SqlAlchemyDriver',
    'bind_statement',
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedStatement:
    """SQL template plus the values and markers bound to it."""
    sql: str
    values: tuple[Scalar, ...] = ()
    types: tuple[BindType, ...] = ()

    @property
    def markers(self) -> str:
        return marker_string(self.types)


@dataclass
class Result:
    """Fully fetched outcome of one statement."""
    columns: list[str] = field(default_factory=list)
    rows: list[tuple] = field(default_factory=list)
    rowcount: int = -1


@runtime_checkable
class Driver(Protocol):
    """Primitive operations the query builder needs from a database."""

    def prepare(self, sql: str) -> PreparedStatement: ...

    def bind(self, stmt: PreparedStatement, values: Sequence[Scalar],
             types: Sequence[BindType]) -> PreparedStatement: ...

    def execute(self, stmt: PreparedStatement) -> Result: ...

    def query(self, sql: str) -> Result: ...

    def fetch_all(self, result: Result) -> list[Record]: ...

    def fetch_scalar(self, result: Result) -> Scalar: ...

    def close(self) -> None: ...


def bind_statement(stmt: PreparedStatement, values: Sequence[Scalar],
                   types: Sequence[BindType]) -> PreparedStatement:
    """Attach values to a statement, coercing each one to its marker's type.

    Raises QueryError when the value and marker sequences differ in length.
    """
    if len(values) != len(types):
        raise QueryError(f'bind(): {len(values)} values but {len(types)} type markers')
    coerced = tuple(coerce_bind_value(v, t) for v, t in zip(values, types))
    return replace(stmt, values=coerced, types=tuple(types))


def records_from_result(result: Result) -> list[Record]:
    """One dict per row, keys in column order."""
    return [dict(zip(result.columns, row)) for row in result.rows]


def scalar_from_result(result: Result) -> Scalar:
    """First column of the first row, None for an empty result."""
    if not result.rows:
        return None
    return result.rows[0][0]


def dumpsql(func):
    """Decorator for logging SQL statements, parameters and timing."""
    @wraps(func)
    def wrapper(self, operation: PreparedStatement | str, *args: Any, **kwargs: Any):
        start = time.time()
        if isinstance(operation, PreparedStatement):
            sql, params = operation.sql, operation.values
            logger.debug(f'SQL:\n{sql}\nargs: {params} types: {operation.markers!r}')
        else:
            sql, params = operation, ()
            logger.debug(f'SQL:\n{sql}')
        try:
            return func(self, operation, *args, **kwargs)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{sql}\nargs: {params}')
            raise
        finally:
            elapsed = time.time() - start
            self.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


class SqlAlchemyDriver:
    """Driver over a single SQLAlchemy connection.

    The connection must already be configured by the dialect strategy
    (autocommit on, charset applied). Not safe to share across threads.
    """

    def __init__(self, sa_connection: sa.engine.Connection, strategy: DatabaseStrategy) -> None:
        self.sa_connection = sa_connection
        self.engine = sa_connection.engine
        self.dbapi_connection = sa_connection.connection
        self.strategy = strategy
        self.calls = 0
        self.time = 0

    @property
    def dialect(self) -> str:
        return self.strategy.dialect_name

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    def prepare(self, sql: str) -> PreparedStatement:
        """Rewrite placeholders for the dialect; nothing is sent yet."""
        return PreparedStatement(self.strategy.standardize_sql(sql))

    def bind(self, stmt: PreparedStatement, values: Sequence[Scalar],
             types: Sequence[BindType]) -> PreparedStatement:
        return bind_statement(stmt, values, types)

    def _check_open(self) -> None:
        if self.sa_connection.closed:
            raise ConnectionFailure('connection is closed')

    def _run(self, sql: str, params: tuple | None) -> Result:
        cursor = self.dbapi_connection.cursor()
        try:
            if params is None:
                cursor.execute(sql)
            else:
                cursor.execute(sql, params)
            columns = column_names(cursor.description)
            rows = [tuple(row) for row in cursor.fetchall()] if columns else []
            return Result(columns=columns, rows=rows, rowcount=cursor.rowcount)
        finally:
            cursor.close()

    def execute(self, stmt: PreparedStatement) -> Result:
        """Execute a prepared statement with its bound values."""
        self._check_open()
        return self._execute(stmt)

    @dumpsql
    def _execute(self, stmt: PreparedStatement) -> Result:
        result = self._run(stmt.sql, stmt.values)
        logger.debug(f'Executed statement with {len(stmt.values)} parameters, rowcount {result.rowcount}')
        return result

    def query(self, sql: str) -> Result:
        """Execute SQL as-is, without parameters."""
        self._check_open()
        return self._query(sql)

    @dumpsql
    def _query(self, sql: str) -> Result:
        return self._run(sql, None)

    def fetch_all(self, result: Result) -> list[Record]:
        return records_from_result(result)

    def fetch_scalar(self, result: Result) -> Scalar:
        return scalar_from_result(result)

    def close(self) -> None:
        """Close the connection and dispose of its engine."""
        if not self.sa_connection.closed:
            self.sa_connection.close()
            logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s '
                         f'(avg: {self.time/max(1,self.calls):.3f}s per query)')
        self.engine.dispose()

    def __repr__(self) -> str:
        return f'{type(self).__name__}(dialect={self.dialect!r}, calls={self.calls})'
