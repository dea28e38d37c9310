"""
Backends Module

Storage backends the seeder flushes records into:
- memory: in-process tables, for dry runs and tests
- sqlite: a SQLite database file
"""

from typing import Dict, Any, Optional

from .base import Backend, TableDefinition, ColumnDefinition
from .types import map_field_type_to_backend_type, TYPE_MAPPERS
from .memory import InMemoryBackend
from .sqlite import SQLiteBackend
from ..exceptions import UnsupportedBackendError


def create_backend(client: str, connection: Optional[Dict[str, Any]] = None, batch_size: int = 500) -> Backend:
    """
    Build a backend from connection settings

    Args:
        client: Backend client name
        connection: Client specific settings (sqlite: ``filename``)
        batch_size: Rows per insert statement batch

    Returns:
        Backend instance

    Raises:
        UnsupportedBackendError: for unknown clients, or clients whose types
            are known but that ship no bundled backend
    """
    connection = connection or {}
    if client == 'memory':
        return InMemoryBackend()
    if client == 'sqlite':
        return SQLiteBackend(
            database=connection.get('filename', ':memory:'),
            batch_size=batch_size,
        )
    if client in TYPE_MAPPERS:
        raise UnsupportedBackendError(client, "no bundled backend; pass a Backend instance to Seeder")
    raise UnsupportedBackendError(client)


__all__ = [
    "Backend",
    "TableDefinition",
    "ColumnDefinition",
    "InMemoryBackend",
    "SQLiteBackend",
    "create_backend",
    "map_field_type_to_backend_type",
]
