"""Unit tests for the WHERE-clause sub-protocol and fetch options."""
import pytest
from tablequery.exceptions import ContractError
from tablequery.filters import FetchOptions, FilterSpec, as_fetch_options
from tablequery.filters import as_filter, where_clause, where_values


class TestWhereClause:

    def test_condition_is_appended_verbatim(self):
        where = {'condition': "name = ? AND note LIKE '%x%'", 'values': ['Bob']}
        assert where_clause(where) == " WHERE name = ? AND note LIKE '%x%'"

    def test_filterspec_and_mapping_are_equivalent(self):
        spec = FilterSpec('id = ?', [1])
        assert where_clause(spec) == where_clause({'condition': 'id = ?', 'values': [1]})
        assert where_values(spec) == where_values({'condition': 'id = ?', 'values': [1]})

    @pytest.mark.parametrize('where', [
        {},
        {'values': [1]},
        {'condition': None, 'values': []},
        FilterSpec(None, [1]),
    ], ids=['empty', 'values_only', 'none_condition', 'spec_none_condition'])
    def test_missing_condition_raises(self, where):
        with pytest.raises(ContractError, match="'condition' parameter is required"):
            where_clause(where)

    def test_unknown_filter_key_raises(self):
        with pytest.raises(ContractError, match='params'):
            as_filter({'condition': 'id = ?', 'params': [1]})

    def test_wrong_filter_type_raises(self):
        with pytest.raises(ContractError):
            as_filter('id = 1')


class TestWhereValues:

    @pytest.mark.parametrize('where', [
        {'condition': '1=1'},
        {'condition': '1=1', 'values': []},
        {'condition': '1=1', 'values': None},
        FilterSpec('1=1'),
    ], ids=['absent', 'empty_list', 'none', 'spec_default'])
    def test_values_default_to_empty(self, where):
        assert where_values(where) == []

    def test_values_keep_order(self):
        where = {'condition': 'a = ? AND b = ? AND c = ?', 'values': (3, 'two', 1.0)}
        assert where_values(where) == [3, 'two', 1.0]

    @pytest.mark.parametrize('values', [
        'abc',
        b'abc',
        {'k': 1},
        {1, 2},
        frozenset([1]),
        7,
    ], ids=['str', 'bytes', 'dict', 'set', 'frozenset', 'int'])
    def test_unordered_or_scalar_values_rejected(self, values):
        with pytest.raises(ContractError, match='ordered sequence'):
            where_values({'condition': 'a = ?', 'values': values})


class TestFetchOptions:

    @pytest.mark.parametrize('options', [None, {}], ids=['none', 'empty'])
    def test_empty_options(self, options):
        assert as_fetch_options(options) == FetchOptions()

    def test_mapping_options(self):
        options = as_fetch_options({'order_by': 'name DESC', 'limit': 5})
        assert options.order_by == 'name DESC'
        assert options.limit == 5
        assert options.offset is None
        assert options.where is None

    def test_unknown_option_key_raises(self):
        with pytest.raises(ContractError, match='order'):
            as_fetch_options({'order': 'name'})

    def test_instance_passes_through(self):
        options = FetchOptions(limit=1)
        assert as_fetch_options(options) is options
