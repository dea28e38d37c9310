"""
Test Suite for the Seeding Orchestrator

Tests:
- Initial seeding into the in-memory backend
- Flush ordering and table creation
- Continuous seeding with updates and deletes
- Reproducibility, file dumps and error reporting
"""

import asyncio
import json

import pytest

from seeder import Seeder, SeederConfig, SeederState, InMemoryBackend, SQLiteBackend
from seeder.config import ConnectionConfig
from seeder.exceptions import (
    ConfigError,
    CyclicDependencyError,
    UnknownFieldTypeError,
    UnsupportedBackendError,
)



def shop_schema(on_delete='cascade'):
    order_ref = {'type': 'reference', 'referenceType': 'belongsToOne', 'entity': 'User', 'field': 'id'}
    tag_ref = {
        'type': 'reference', 'referenceType': 'belongsToMany', 'entity': 'Tag', 'field': 'id',
        'count': {'min': 1, 'max': 2},
    }
    if on_delete:
        order_ref['onDelete'] = on_delete
        tag_ref['onDelete'] = on_delete
    return {
        'User': {
            'count': 3,
            'constraints': {'primaryKey': ['id'], 'unique': ['email']},
            'fields': {
                'id': {'type': 'sequence'},
                'email': {'type': 'email'},
                'full_name': {'type': ['first_name', 'space', 'last_name']},
            },
        },
        'Tag': {
            'count': 4,
            'constraints': {'primaryKey': ['id']},
            'fields': {'id': {'type': 'sequence'}, 'label': {'type': 'word'}},
        },
        'Order': {
            'count': 2,
            'constraints': {'primaryKey': ['id']},
            'fields': {
                'id': {'type': 'sequence'},
                'total': {'type': 'price'},
                'user_id': order_ref,
                'tags': tag_ref,
            },
        },
    }


def make_config(schema=None, **kwargs):
    kwargs.setdefault('seed', 42)
    kwargs.setdefault('continuous_delay', 0)
    return SeederConfig(schema=schema or shop_schema(), **kwargs)


class ScriptedRng:
    """Stand-in for the seeder's count/classification draws"""

    def __init__(self, counts, draw):
        self.counts = list(counts)
        self.draw = draw

    def integers(self, low, high=None):
        return self.counts.pop(0)

    def random(self):
        return self.draw


@pytest.fixture
def backend():
    return InMemoryBackend()


class TestInitialSeeding:
    """Test the initial phase"""

    def test_single_entity(self, backend):
        """Three users with sequence ids 1, 2, 3"""
        config = make_config({'User': {
            'count': 3,
            'constraints': {'primaryKey': ['id']},
            'fields': {'id': {'type': 'sequence'}, 'email': {'type': 'email'}},
        }})
        seeder = Seeder(config, backend=backend)
        inserted = asyncio.run(seeder.start())

        assert inserted == {'User': 3}
        assert [row['id'] for row in backend.tables['User']] == [1, 2, 3]
        assert seeder.state == SeederState.DONE
        assert backend.closed

    def test_flush_order_follows_dependencies(self, backend):
        seeder = Seeder(make_config(), backend=backend)
        asyncio.run(seeder.start())

        inserts = [name for op, name in backend.operations if op == 'insert']
        assert inserts.index('Order') > inserts.index('User')
        assert inserts.index('Order') > inserts.index('Tag')
        assert inserts.index('Tag_Order') > inserts.index('Order')

        creates = [name for op, name in backend.operations if op == 'create']
        assert creates.index('Tag_Order') > creates.index('Order')

    def test_referential_integrity(self, backend):
        seeder = Seeder(make_config(iterations=2), backend=backend)
        asyncio.run(seeder.start())

        user_ids = {row['id'] for row in backend.tables['User']}
        order_ids = {row['id'] for row in backend.tables['Order']}
        tag_ids = {row['id'] for row in backend.tables['Tag']}

        assert len(user_ids) == 6
        assert all(row['user_id'] in user_ids for row in backend.tables['Order'])
        for link in backend.tables['Tag_Order']:
            assert link['Tag_id'] in tag_ids
            assert link['Order_id'] in order_ids

    def test_junction_columns(self, backend):
        seeder = Seeder(make_config(), backend=backend)
        asyncio.run(seeder.start())

        assert backend.definitions['Tag_Order'].column_names == ['Tag_id', 'Order_id']
        assert 'tags' not in backend.definitions['Order'].column_names
        assert 1 <= len(backend.tables['Tag_Order']) <= 4

    def test_records_cleared_after_pass(self, backend):
        seeder = Seeder(make_config(), backend=backend)
        asyncio.run(seeder.start())
        assert seeder.get_records('User') == []

    def test_zero_iterations(self, backend):
        seeder = Seeder(make_config(iterations=0), backend=backend)
        assert asyncio.run(seeder.start()) == {}
        assert set(backend.definitions) == {'User', 'Tag', 'Order', 'Tag_Order'}

    def test_drop_existing(self, backend):
        seeder = Seeder(make_config(drop_existing=True), backend=backend)
        asyncio.run(seeder.start())

        drops = [name for op, name in backend.operations if op == 'drop']
        assert drops.index('Tag_Order') < drops.index('Order') < drops.index('User')

    def test_reproducible_with_seed(self):
        first, second = InMemoryBackend(), InMemoryBackend()
        asyncio.run(Seeder(make_config(seed=7), backend=first).start())
        asyncio.run(Seeder(make_config(seed=7), backend=second).start())

        assert first.tables == second.tables


class TestContinuousSeeding:
    """Test the continuous phase"""

    def test_runs_configured_passes(self, backend):
        seeder = Seeder(make_config(continuous_iterations=3), backend=backend)
        asyncio.run(seeder.start())

        assert seeder.state == SeederState.DONE
        assert len(backend.tables['User']) >= 3

    def test_updates_and_deletes_applied(self, backend):
        config = make_config({'User': {
            'count': 1,
            'constraints': {'primaryKey': ['id']},
            'fields': {'id': {'type': 'sequence'}, 'name': {'type': 'name'}},
        }}, continuous_iterations=20)
        seeder = Seeder(config, backend=backend)
        asyncio.run(seeder.start())

        updates = [q for q in seeder.update_queue if q.entity == 'User']
        deletes = [q for q in seeder.delete_queue if q.entity == 'User']
        assert updates and deletes

        remaining = {row['id'] for row in backend.tables['User']}
        assert all(q.record['id'] not in remaining for q in deletes)
        assert ('update', 'User') in backend.operations
        assert ('delete', 'User') in backend.operations

    def test_entities_without_delete_policy_kept(self, backend):
        config = make_config(shop_schema(on_delete=None), continuous_iterations=10)
        seeder = Seeder(config, backend=backend)
        asyncio.run(seeder.start())

        assert 'User' not in seeder.deletable_entities
        assert ('delete', 'User') not in backend.operations

    def test_zero_draw_stops_later_levels(self, backend):
        """A zero count for User skips Order and Tag_Order but Tag in the same level still runs"""
        seeder = Seeder(make_config(), backend=backend)
        seeder.rng = ScriptedRng(counts=[0, 2], draw=0.5)

        updates, deletes = seeder._generate_continuous_pass()

        assert seeder.get_records('User') == []
        assert len(seeder.get_records('Tag')) == 2
        assert seeder.get_records('Order') == []
        assert seeder.get_records('Tag_Order') == []
        assert updates == [] and deletes == []

    def test_nonzero_draws_reach_every_level(self, backend):
        seeder = Seeder(make_config(), backend=backend)
        seeder.rng = ScriptedRng(counts=[1, 3, 2], draw=0.1)

        updates, _ = seeder._generate_continuous_pass()

        assert len(seeder.get_records('User')) == 1
        assert len(seeder.get_records('Order')) == 2
        assert [q.entity for q in updates] == ['User', 'Tag', 'Tag', 'Tag', 'Order', 'Order']

    def test_returns_accumulated_queues(self, backend):
        seeder = Seeder(make_config(), backend=backend)

        async def scenario():
            await seeder.create_tables()
            return await seeder.seed_continuous_data(2, [], [])

        updates, deletes = asyncio.run(scenario())
        assert isinstance(updates, list)
        assert isinstance(deletes, list)
        assert all(q.entity in seeder.entities for q in updates + deletes)


class TestOutputAndErrors:
    """Test file dumps and error reporting"""

    def test_save_all_records_to_files(self, backend, tmp_path):
        seeder = Seeder(make_config(), backend=backend)
        asyncio.run(seeder.create_tables())
        for _ in range(2):
            seeder.registry.get('User').generate()

        paths = seeder.save_all_records_to_files(tmp_path)

        assert {p.name for p in paths} == {'User.json', 'Tag.json', 'Order.json', 'Tag_Order.json'}
        users = json.loads((tmp_path / 'User.json').read_text())
        assert [u['id'] for u in users] == [1, 2]

    def test_dump_directory(self, backend, tmp_path):
        seeder = Seeder(make_config(), backend=backend, dump_directory=tmp_path)
        asyncio.run(seeder.start())

        users = json.loads((tmp_path / 'pass_1' / 'User.json').read_text())
        assert len(users) == 3
        assert seeder.pass_count == 1

    def test_dump_keeps_every_pass(self, backend, tmp_path):
        """Each pass gets its own directory, so together they hold every flushed record"""
        config = make_config({'User': {
            'count': 3,
            'constraints': {'primaryKey': ['id']},
            'fields': {'id': {'type': 'sequence'}},
        }}, iterations=2)
        seeder = Seeder(config, backend=backend, dump_directory=tmp_path)
        asyncio.run(seeder.start())

        dumped = [
            user['id']
            for pass_dir in ('pass_1', 'pass_2')
            for user in json.loads((tmp_path / pass_dir / 'User.json').read_text())
        ]
        assert dumped == [1, 2, 3, 4, 5, 6]
        assert dumped == [row['id'] for row in backend.tables['User']]

    def test_unsupported_backend(self):
        config = make_config(connection=ConnectionConfig(client='oracle'))
        with pytest.raises(UnsupportedBackendError):
            Seeder(config)

    def test_unbundled_backend(self):
        config = make_config(connection=ConnectionConfig(client='postgres'))
        with pytest.raises(UnsupportedBackendError, match='no bundled backend'):
            Seeder(config)

    def test_cycle(self, backend):
        schema = {
            'A': {'fields': {'b': {'type': 'reference', 'referenceType': 'belongsToOne', 'entity': 'B', 'field': 'id'}}},
            'B': {'fields': {'a': {'type': 'reference', 'referenceType': 'belongsToOne', 'entity': 'A', 'field': 'id'}}},
        }
        with pytest.raises(CyclicDependencyError):
            Seeder(make_config(schema), backend=backend)

    def test_unknown_field_type_before_tables(self, backend):
        seeder = Seeder(make_config({'User': {'count': 1, 'fields': {'x': {'type': 'bogus'}}}}), backend=backend)
        with pytest.raises(UnknownFieldTypeError):
            asyncio.run(seeder.start())

        assert backend.operations == []
        assert backend.closed

    def test_invalid_config(self, backend):
        with pytest.raises(ConfigError):
            Seeder(make_config(iterations=-1), backend=backend)

    def test_custom_field_type(self, backend):
        seeder = Seeder(make_config({'User': {'count': 2, 'fields': {'code': {'type': 'sku'}}}}), backend=backend)
        seeder.synthesizer.register('sku', lambda f: 'SKU-1')
        asyncio.run(seeder.start())

        assert backend.tables['User'] == [{'code': 'SKU-1'}, {'code': 'SKU-1'}]


def test_sqlite_end_to_end(tmp_path):
    config = make_config(
        connection=ConnectionConfig(client='sqlite', connection={'filename': str(tmp_path / 'shop.db')}),
        continuous_iterations=2,
    )
    seeder = Seeder(config)
    inserted = asyncio.run(seeder.start())

    assert isinstance(seeder.backend, SQLiteBackend)
    assert inserted['User'] >= 3
    orders = seeder.backend.fetch_all('Order')
    user_ids = {u['id'] for u in seeder.backend.fetch_all('User')}
    assert all(o['user_id'] is None or o['user_id'] in user_ids for o in orders)
