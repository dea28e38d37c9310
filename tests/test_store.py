"""
Test Suite for Record Stores

Tests the structural filter, random sampling and the entity registry.
"""

import pytest
import numpy as np

from seeder.store import RecordStore, EntityRegistry, matches


@pytest.fixture
def store():
    store = RecordStore('User')
    for i, (age, country) in enumerate([(17, 'US'), (25, 'DE'), (40, 'US'), (63, 'FR')], start=1):
        store.add({'id': i, 'age': age, 'country': country})
    return store


@pytest.fixture
def rng():
    return np.random.default_rng(7)


class TestMatches:
    """Test the filter predicate"""

    def test_empty_query_matches_everything(self):
        assert matches({'a': 1}, None)
        assert matches({'a': 1}, {})

    def test_equality(self):
        assert matches({'country': 'US'}, {'country': 'US'})
        assert not matches({'country': 'DE'}, {'country': 'US'})
        assert not matches({}, {'country': 'US'})

    def test_comparison_operators(self):
        record = {'age': 30}
        assert matches(record, {'age': {'$gte': 30, '$lt': 31}})
        assert not matches(record, {'age': {'$gt': 30}})
        assert matches(record, {'age': {'$lte': 30}})
        assert matches(record, {'age': {'$ne': 29}})

    def test_membership_operators(self):
        record = {'country': 'FR'}
        assert matches(record, {'country': {'$in': ['FR', 'DE']}})
        assert matches(record, {'country': {'$nin': ['US']}})
        assert not matches(record, {'country': {'$in': ['US']}})

    def test_exists(self):
        assert matches({'a': None}, {'a': {'$exists': True}})
        assert matches({}, {'a': {'$exists': False}})
        assert not matches({}, {'a': {'$exists': True}})

    def test_comparison_with_none(self):
        assert not matches({'age': None}, {'age': {'$gt': 1}})

    def test_unknown_operator(self):
        with pytest.raises(ValueError):
            matches({'a': 1}, {'a': {'$regex': '.*'}})

    def test_plain_dict_value_is_equality(self):
        assert matches({'meta': {'k': 1}}, {'meta': {'k': 1}})


class TestRecordStore:
    """Test per-entity record storage"""

    def test_filter(self, store):
        adults = store.filter({'age': {'$gte': 18}})
        assert [r['id'] for r in adults] == [2, 3, 4]

    def test_random_record_respects_query(self, store, rng):
        for _ in range(20):
            assert store.random_record(rng, {'country': 'US'})['country'] == 'US'

    def test_random_record_empty_result(self, store, rng):
        assert store.random_record(rng, {'country': 'JP'}) == {}
        assert RecordStore('Empty').random_record(rng) == {}

    def test_random_records_distinct(self, store, rng):
        picked = store.random_records(rng, 3)
        assert len(picked) == 3
        assert len({r['id'] for r in picked}) == 3

    def test_random_records_capped_by_matches(self, store, rng):
        picked = store.random_records(rng, 10, {'country': 'US'})
        assert sorted(r['id'] for r in picked) == [1, 3]
        assert store.random_records(rng, 0) == []

    def test_reset(self, store):
        store.reset()
        assert len(store) == 0
        assert store.records == []


class TestEntityRegistry:
    """Test the generator lookup"""

    def test_lookup(self):
        registry = EntityRegistry({'User': 'generator'})
        assert 'User' in registry
        assert registry.get('User') == 'generator'
        assert registry.names() == ['User']
        assert len(registry) == 1

    def test_unknown_entity(self):
        with pytest.raises(KeyError, match='Order'):
            EntityRegistry().get('Order')

    def test_register(self):
        registry = EntityRegistry()
        registry.register('User', 'users')
        registry.register('Tag', 'tags')

        assert registry.names() == ['User', 'Tag']
        assert registry.items() == [('User', 'users'), ('Tag', 'tags')]
