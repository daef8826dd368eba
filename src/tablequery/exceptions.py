"""
Query builder exception classes.

`ContractError` signals a caller bug detected before any SQL reaches the
driver. Everything raised by the database itself propagates unmodified; the
exception groups below let callers catch those across drivers.
"""
import sqlite3

import psycopg


class ContractError(ValueError):
    """Caller violated the query builder contract.

    Raised for a filter without a condition, a value whose type cannot be
    bound, or malformed fetch options. Never raised by the database.
    """


class DatabaseError(Exception):
    """Base class for all tablequery database errors.
    """


class ConnectionFailure(DatabaseError):
    """Error establishing the database connection or applying its charset.
    """


class QueryError(DatabaseError):
    """Error preparing or binding a statement.
    """


DbConnectionError = (
    psycopg.OperationalError,
    psycopg.InterfaceError,
    sqlite3.OperationalError,
    sqlite3.InterfaceError,
    ConnectionFailure,
    )

IntegrityError = (
    psycopg.IntegrityError,
    sqlite3.IntegrityError,
    )

ProgrammingError = (
    psycopg.ProgrammingError,
    psycopg.DatabaseError,
    sqlite3.ProgrammingError,
    sqlite3.DatabaseError,
    QueryError,
    )

OperationalError = (
    psycopg.OperationalError,
    sqlite3.OperationalError,
    )

UniqueViolation = (
    psycopg.errors.UniqueViolation,
    sqlite3.IntegrityError,
    )

DbApiError = (
    psycopg.Error,
    sqlite3.Error,
    )
