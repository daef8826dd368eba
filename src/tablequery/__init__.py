"""
Structured query builder over parameterized SQL.

Build SELECT / COUNT / INSERT / UPDATE / DELETE statements from table names,
column lists and filters, with every value bound as a typed parameter:

    qb = tablequery.connect(drivername='sqlite', database=':memory:')
    qb.insert('users', {'name': 'Alice', 'age': 30})
    qb.fetch('users', ['id', 'name'], {'where': {'condition': 'age > ?', 'values': [18]},
                                       'order_by': 'name', 'limit': 10})

Table names, column names, ORDER BY expressions and filter conditions are
trusted caller input and are never escaped. Only values are injection-safe.
"""
__version__ = '0.1.0'

from tablequery.client import QueryBuilder
from tablequery.connection import connect
from tablequery.driver import Driver, PreparedStatement, Result
from tablequery.driver import SqlAlchemyDriver
from tablequery.exceptions import ConnectionFailure, ContractError
from tablequery.exceptions import DatabaseError, DbApiError, DbConnectionError
from tablequery.exceptions import IntegrityError, OperationalError
from tablequery.exceptions import ProgrammingError, QueryError
from tablequery.exceptions import UniqueViolation
from tablequery.filters import FetchOptions, FilterSpec
from tablequery.options import DatabaseOptions
from tablequery.types import BindType, bind_type_for

__all__ = [
    'connect',
    'QueryBuilder',
    'DatabaseOptions',
    'FilterSpec',
    'FetchOptions',
    'BindType',
    'bind_type_for',
    'Driver',
    'SqlAlchemyDriver',
    'PreparedStatement',
    'Result',
    'ContractError',
    'DatabaseError',
    'ConnectionFailure',
    'QueryError',
    'DbApiError',
    'DbConnectionError',
    'IntegrityError',
    'ProgrammingError',
    'OperationalError',
    'UniqueViolation',
]
