"""
Test Suite for Backend Type Mapping and Backend Selection
"""

import pytest

from seeder.backends import map_field_type_to_backend_type, create_backend, InMemoryBackend, SQLiteBackend
from seeder.exceptions import UnsupportedBackendError


class TestTypeMapping:
    """Test field type -> column type mapping"""

    @pytest.mark.parametrize("field_type,expected", [
        ('sequence', 'integer'),
        ('random_int', 'integer'),
        ('pyfloat', 'real'),
        ('price', 'money'),
        ('paragraph', 'varchar(512)'),
        ('date_time', 'timestamp with time zone'),
        ('date', 'date'),
        ('boolean', 'boolean'),
        ('email', 'varchar(256)'),
    ])
    def test_postgres(self, field_type, expected):
        assert map_field_type_to_backend_type(field_type, 'postgres') == expected

    def test_mysql(self):
        assert map_field_type_to_backend_type('price', 'mysql') == 'real'
        assert map_field_type_to_backend_type('date_time', 'mysql2') == 'timestamp'
        assert map_field_type_to_backend_type('first_name', 'mysql') == 'varchar(256)'

    def test_sqlite(self):
        assert map_field_type_to_backend_type('sequence', 'sqlite') == 'INTEGER'
        assert map_field_type_to_backend_type('boolean', 'sqlite') == 'INTEGER'
        assert map_field_type_to_backend_type('price', 'sqlite') == 'REAL'
        assert map_field_type_to_backend_type('date_time', 'sqlite') == 'TEXT'

    def test_unknown_client(self):
        with pytest.raises(UnsupportedBackendError) as exc_info:
            map_field_type_to_backend_type('sequence', 'oracle')
        assert exc_info.value.client == 'oracle'


class TestCreateBackend:
    """Test backend construction from connection settings"""

    def test_memory(self):
        assert isinstance(create_backend('memory'), InMemoryBackend)

    def test_sqlite(self, tmp_path):
        backend = create_backend('sqlite', {'filename': str(tmp_path / 'seed.db')}, batch_size=10)
        assert isinstance(backend, SQLiteBackend)
        assert backend.batch_size == 10

    def test_known_client_without_backend(self):
        with pytest.raises(UnsupportedBackendError, match='no bundled backend'):
            create_backend('postgres')

    def test_unknown_client(self):
        with pytest.raises(UnsupportedBackendError):
            create_backend('oracle')
