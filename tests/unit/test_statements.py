"""Unit tests for statement assembly.

Tests the public API:
- build_select / build_count / build_insert / build_update / build_delete
- count_placeholders(sql) - Count positional placeholders
- standardize_placeholders(sql, dialect) - Convert ? <-> %s
"""
import pytest
from tablequery.exceptions import ContractError
from tablequery.filters import FetchOptions, FilterSpec
from tablequery.sql import build_count, build_delete, build_insert
from tablequery.sql import build_select, build_update, count_placeholders
from tablequery.sql import standardize_placeholders


class TestBuildSelect:

    @pytest.mark.parametrize(('options', 'expected_sql', 'expected_values'), [
        (None,
         'SELECT id,name FROM users',
         []),
        ({},
         'SELECT id,name FROM users',
         []),
        ({'where': {'condition': 'age > ? AND city = ?', 'values': [30, 'Oslo']}},
         'SELECT id,name FROM users WHERE age > ? AND city = ?',
         [30, 'Oslo']),
        ({'order_by': 'name DESC'},
         'SELECT id,name FROM users ORDER BY name DESC',
         []),
        ({'limit': 10},
         'SELECT id,name FROM users LIMIT 10',
         []),
        ({'limit': '10', 'offset': 5.0},
         'SELECT id,name FROM users LIMIT 10 OFFSET 5',
         []),
        ({'offset': 5},
         'SELECT id,name FROM users',
         []),
        ({'limit': 0},
         'SELECT id,name FROM users LIMIT 0',
         []),
        ({'where': None, 'order_by': 'id'},
         'SELECT id,name FROM users ORDER BY id',
         []),
        (FetchOptions(where=FilterSpec('id = ?', [1]), order_by='id', limit=1, offset=2),
         'SELECT id,name FROM users WHERE id = ? ORDER BY id LIMIT 1 OFFSET 2',
         [1]),
    ], ids=['none', 'empty', 'where', 'order_by', 'limit', 'coerced_limit_offset',
            'offset_without_limit', 'zero_limit', 'none_where', 'all_clauses'])
    def test_clause_assembly(self, options, expected_sql, expected_values):
        sql, values = build_select('users', ['id', 'name'], options)
        assert sql == expected_sql
        assert values == expected_values

    def test_clause_order_is_fixed(self):
        options = {'offset': 3, 'limit': 2, 'order_by': 'id',
                   'where': {'condition': 'id > ?', 'values': [0]}}
        sql, _ = build_select('t', ['*'], options)
        assert sql.index(' WHERE ') < sql.index(' ORDER BY ') < sql.index(' LIMIT ') < sql.index(' OFFSET ')

    @pytest.mark.parametrize('columns', [[], (), 'id,name'], ids=['list', 'tuple', 'string'])
    def test_bad_columns_raise(self, columns):
        with pytest.raises(ContractError):
            build_select('users', columns)

    @pytest.mark.parametrize('options', [
        {'limit': -1},
        {'limit': 'ten'},
        {'limit': True},
        {'limit': 5, 'offset': -2},
    ], ids=['negative_limit', 'text_limit', 'bool_limit', 'negative_offset'])
    def test_bad_pagination_raises(self, options):
        with pytest.raises(ContractError):
            build_select('users', ['id'], options)

    def test_where_without_condition_raises(self):
        with pytest.raises(ContractError, match='condition'):
            build_select('users', ['id'], {'where': {'values': [1]}})


class TestBuildCount:

    def test_unfiltered_has_no_values(self):
        assert build_count('users') == ('SELECT COUNT(*) FROM users', None)

    def test_filtered(self):
        sql, values = build_count('users', {'condition': 'age >= ?', 'values': [18]})
        assert sql == 'SELECT COUNT(*) FROM users WHERE age >= ?'
        assert values == [18]

    def test_filter_without_values(self):
        assert build_count('users', {'condition': '1=1'}) == ('SELECT COUNT(*) FROM users WHERE 1=1', [])


class TestBuildInsert:

    def test_placeholders_follow_mapping_order(self):
        sql, values = build_insert('users', {'name': 'Alice', 'age': 30, 'score': None})
        assert sql == 'INSERT INTO users (name, age, score) VALUES (?, ?, ?)'
        assert values == ['Alice', 30, None]

    def test_values_never_interpolated(self):
        sql, values = build_insert('users', {'name': "Robert'); DROP TABLE users;--"})
        assert 'DROP' not in sql
        assert values == ["Robert'); DROP TABLE users;--"]

    def test_empty_values_raise(self):
        with pytest.raises(ContractError):
            build_insert('users', {})


class TestBuildUpdate:

    def test_set_values_precede_where_values(self):
        sql, values = build_update('tasks', {'status': 'done', 'tries': 2},
                                   {'condition': 'id = ? OR owner = ?', 'values': [7, 'bob']})
        assert sql == 'UPDATE tasks SET status = ?, tries = ? WHERE id = ? OR owner = ?'
        assert values == ['done', 2, 7, 'bob']

    def test_without_where(self):
        sql, values = build_update('tasks', {'status': 'done'}, None)
        assert sql == 'UPDATE tasks SET status = ?'
        assert values == ['done']

    def test_where_values_list_not_mutated(self):
        where_list = [7]
        build_update('tasks', {'status': 'done'}, {'condition': 'id = ?', 'values': where_list})
        assert where_list == [7]

    def test_empty_values_raise(self):
        with pytest.raises(ContractError):
            build_update('tasks', {}, {'condition': 'id = ?', 'values': [1]})


class TestBuildDelete:

    def test_unfiltered_delete(self):
        assert build_delete('users', None) == ('DELETE FROM users', None)

    def test_filtered_delete(self):
        assert build_delete('users', FilterSpec('id = ?', [1])) == ('DELETE FROM users WHERE id = ?', [1])


class TestPlaceholders:

    @pytest.mark.parametrize(('sql', 'expected'), [
        ('', 0),
        ('1=1', 0),
        ('id = ?', 1),
        ('a = ? AND b = %s', 2),
        ("a = ? AND b = '?'", 1),
        ('"weird?col" = ?', 1),
    ], ids=['empty', 'none', 'one', 'mixed', 'quoted_literal', 'quoted_identifier'])
    def test_count_placeholders(self, sql, expected):
        assert count_placeholders(sql) == expected

    @pytest.mark.parametrize(('sql', 'dialect', 'expected'), [
        ('SELECT a FROM t WHERE id = ?', 'sqlite', 'SELECT a FROM t WHERE id = ?'),
        ('SELECT a FROM t WHERE id = %s', 'sqlite', 'SELECT a FROM t WHERE id = ?'),
        ("SELECT a FROM t WHERE n = '%s' AND id = %s", 'sqlite',
         "SELECT a FROM t WHERE n = '%s' AND id = ?"),
        ('SELECT a FROM t WHERE id = ?', 'postgresql', 'SELECT a FROM t WHERE id = %s'),
        ("SELECT a FROM t WHERE n LIKE 'a%' AND id = ?", 'postgresql',
         "SELECT a FROM t WHERE n LIKE 'a%%' AND id = %s"),
        ("SELECT a FROM t WHERE n = '?' AND id = ?", 'postgresql',
         "SELECT a FROM t WHERE n = '?' AND id = %s"),
        ('SELECT a %% 2 FROM t', 'sqlite', 'SELECT a % 2 FROM t'),
        ("SELECT a FROM t WHERE n LIKE 'a%%' AND id = %s", 'sqlite',
         "SELECT a FROM t WHERE n LIKE 'a%%' AND id = ?"),
        ('SELECT a % 2 FROM t', 'postgresql', 'SELECT a %% 2 FROM t'),
        ('SELECT a %% 2 FROM t', 'postgresql', 'SELECT a %% 2 FROM t'),
        ('SELECT 1', 'postgresql', 'SELECT 1'),
    ], ids=['sqlite_native', 'sqlite_from_percent_s', 'sqlite_literal_kept',
            'pg_qmark', 'pg_like_literal', 'pg_qmark_literal_kept',
            'sqlite_escaped_modulo', 'sqlite_escaped_in_literal_kept',
            'pg_modulo', 'pg_escaped_modulo', 'pg_plain'])
    def test_standardize_placeholders(self, sql, dialect, expected):
        assert standardize_placeholders(sql, dialect) == expected

    def test_unknown_dialect(self):
        with pytest.raises(ValueError, match='Unknown dialect'):
            standardize_placeholders('SELECT ?', 'oracle')
