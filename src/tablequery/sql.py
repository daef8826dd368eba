"""
SQL statement assembly and placeholder handling.

Every builder returns a `(sql, values)` pair. `values` is the ordered list of
bind values for a prepared statement, or None when the statement is meant for
the unparameterized query path.

Builders never quote or validate table names, column names, ORDER BY
expressions or WHERE conditions. Those are trusted caller input; only values
are protected, by binding.

Statements are written with `?` placeholders. `standardize_placeholders()`
rewrites them for the target dialect just before execution:

    sqlite      ?   (%s is accepted and converted, %% becomes %)
    postgresql  %s  (literal % is doubled for psycopg)
"""
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from tablequery.exceptions import ContractError
from tablequery.filters import FetchOptions, FilterSpec, as_fetch_options
from tablequery.filters import where_clause, where_values
from tablequery.types import Scalar

__all__ = [
    'build_select',
    'build_count',
    'build_insert',
    'build_update',
    'build_delete',
    'count_placeholders',
    'standardize_placeholders',
    'tokenize_sql',
]


class TokenType(Enum):
    """Token types identified during SQL scanning."""
    SQL_TEXT = auto()
    STRING_LITERAL = auto()
    POSITIONAL_PH = auto()      # %s or ?
    ESCAPED_PERCENT = auto()    # %%
    PERCENT = auto()


@dataclass(slots=True)
class Token:
    """Token from SQL scanning."""
    type: TokenType
    text: str


_TOKENIZE = re.compile(r"""
    (?P<string>'(?:[^']|'')*'|"(?:[^"]|"")*")
    |(?P<percent_s>%s)
    |(?P<qmark>\?)
    |(?P<escaped>%%)
    |(?P<percent>%)
""", re.VERBOSE)

_GROUP_TYPES = {
    'string': TokenType.STRING_LITERAL,
    'percent_s': TokenType.POSITIONAL_PH,
    'qmark': TokenType.POSITIONAL_PH,
    'escaped': TokenType.ESCAPED_PERCENT,
    'percent': TokenType.PERCENT,
    }


def tokenize_sql(sql: str) -> list[Token]:
    """Split SQL into literals, placeholders, percent signs and plain text.
    """
    tokens: list[Token] = []
    pos = 0
    for match in _TOKENIZE.finditer(sql):
        if match.start() > pos:
            tokens.append(Token(TokenType.SQL_TEXT, sql[pos:match.start()]))
        tokens.append(Token(_GROUP_TYPES[match.lastgroup], match.group()))
        pos = match.end()
    if pos < len(sql):
        tokens.append(Token(TokenType.SQL_TEXT, sql[pos:]))
    return tokens


def count_placeholders(sql: str | None) -> int:
    """Count positional placeholders outside string literals.

    >>> count_placeholders("name = ? AND note <> '?' AND age > %s")
    2
    """
    if not sql:
        return 0
    return sum(1 for t in tokenize_sql(sql) if t.type == TokenType.POSITIONAL_PH)


def standardize_placeholders(sql: str, dialect: str = 'postgresql') -> str:
    """Rewrite placeholders for the dialect's DB-API paramstyle.

    Parameters
        sql: SQL statement written with ? or %s placeholders
        dialect: 'sqlite' or 'postgresql'

    Returns
        SQL ready to pass to cursor.execute() together with parameters
    """
    if not sql:
        return sql

    if dialect == 'sqlite':
        if '%' not in sql:
            return sql
        result = []
        for token in tokenize_sql(sql):
            if token.type == TokenType.POSITIONAL_PH:
                result.append('?')
            elif token.type == TokenType.ESCAPED_PERCENT:
                result.append('%')
            else:
                result.append(token.text)
        return ''.join(result)

    if dialect == 'postgresql':
        if '?' not in sql and '%' not in sql:
            return sql
        result = []
        for token in tokenize_sql(sql):
            if token.type == TokenType.POSITIONAL_PH:
                result.append('%s')
            elif token.type == TokenType.PERCENT:
                result.append('%%')
            elif token.type == TokenType.STRING_LITERAL:
                result.append(token.text.replace('%', '%%'))
            else:
                result.append(token.text)
        return ''.join(result)

    raise ValueError(f'Unknown dialect: {dialect}')


def _as_count(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ContractError(f"'{name}' must be an integer, got bool")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ContractError(f"'{name}' must be an integer, got {value!r}") from None
    if number < 0:
        raise ContractError(f"'{name}' must be non-negative, got {number}")
    return number


def _require_columns(values: Mapping[str, Any], verb: str) -> None:
    if not values:
        raise ContractError(f'{verb}() requires at least one column value')


def build_select(table: str, columns: Sequence[str],
                 options: FetchOptions | Mapping[str, Any] | None = None) -> tuple[str, list[Scalar]]:
    """Build a SELECT with optional WHERE, ORDER BY, LIMIT and OFFSET.

    >>> build_select('users', ['id', 'name'], {'where': {'condition': 'age > ?', 'values': [30]},
    ...              'order_by': 'name', 'limit': 10, 'offset': 20})
    ('SELECT id,name FROM users WHERE age > ? ORDER BY name LIMIT 10 OFFSET 20', [30])
    """
    if isinstance(columns, str) or not columns:
        raise ContractError('fetch() requires a non-empty list of columns')
    options = as_fetch_options(options)

    sql = f"SELECT {','.join(columns)} FROM {table}"
    values: list[Scalar] = []

    if options.where is not None:
        sql += where_clause(options.where)
        values = where_values(options.where)

    if options.order_by is not None:
        sql += f' ORDER BY {options.order_by}'

    if options.limit is not None:
        sql += f" LIMIT {_as_count(options.limit, 'limit')}"
        if options.offset is not None:
            sql += f" OFFSET {_as_count(options.offset, 'offset')}"

    return sql, values


def build_count(table: str,
                where: FilterSpec | Mapping[str, Any] | None = None) -> tuple[str, list[Scalar] | None]:
    """Build SELECT COUNT(*); values is None when there is no filter.

    >>> build_count('users')
    ('SELECT COUNT(*) FROM users', None)
    """
    sql = f'SELECT COUNT(*) FROM {table}'
    if where is None:
        return sql, None
    return sql + where_clause(where), where_values(where)


def build_insert(table: str, values: Mapping[str, Scalar]) -> tuple[str, list[Scalar]]:
    """Build an INSERT with one placeholder per column, in mapping order.

    >>> build_insert('users', {'name': 'Alice', 'age': 30})
    ('INSERT INTO users (name, age) VALUES (?, ?)', ['Alice', 30])
    """
    _require_columns(values, 'insert')
    columns = ', '.join(values)
    placeholders = ', '.join(['?'] * len(values))
    sql = f'INSERT INTO {table} ({columns}) VALUES ({placeholders})'
    return sql, list(values.values())


def build_update(table: str, values: Mapping[str, Scalar],
                 where: FilterSpec | Mapping[str, Any] | None = None) -> tuple[str, list[Scalar]]:
    """Build an UPDATE; SET values are bound before WHERE values.

    >>> build_update('tasks', {'status': 'done'}, {'condition': 'id = ?', 'values': [7]})
    ('UPDATE tasks SET status = ? WHERE id = ?', ['done', 7])
    """
    _require_columns(values, 'update')
    assignments = ', '.join(f'{column} = ?' for column in values)
    sql = f'UPDATE {table} SET {assignments}'
    params = list(values.values())
    if where is not None:
        sql += where_clause(where)
        params += where_values(where)
    return sql, params


def build_delete(table: str,
                 where: FilterSpec | Mapping[str, Any] | None) -> tuple[str, list[Scalar] | None]:
    """Build a DELETE; values is None for the unfiltered delete-all form.
    """
    sql = f'DELETE FROM {table}'
    if where is None:
        return sql, None
    return sql + where_clause(where), where_values(where)
