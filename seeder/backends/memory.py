"""
In-memory backend

Keeps every flushed record in plain lists. Used for dry runs and tests.
"""

import logging
from typing import Dict, List, Any, Tuple

from .base import Backend, TableDefinition

logger = logging.getLogger(__name__)


class InMemoryBackend(Backend):
    """
    Backend storing tables as lists of records

    Attributes:
        tables: table name -> flushed records
        definitions: table name -> TableDefinition
        operations: ordered log of (operation, table name) pairs
    """

    client = "memory"

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.definitions: Dict[str, TableDefinition] = {}
        self.operations: List[Tuple[str, str]] = []
        self.closed = False

    async def create_table(self, table: TableDefinition):
        self.definitions[table.name] = table
        self.tables.setdefault(table.name, [])
        self.operations.append(('create', table.name))

    async def drop_table(self, name: str):
        self.definitions.pop(name, None)
        self.tables.pop(name, None)
        self.operations.append(('drop', name))

    def _table(self, name: str) -> List[Dict[str, Any]]:
        if name not in self.tables:
            raise KeyError(f"Table {name!r} does not exist")
        return self.tables[name]

    def _columns(self, name: str) -> List[str]:
        return self.definitions[name].column_names

    async def batch_insert(self, name: str, records: List[Dict[str, Any]]) -> int:
        table = self._table(name)
        columns = self._columns(name)
        table.extend({c: record.get(c) for c in columns} for record in records)
        self.operations.append(('insert', name))
        return len(records)

    @staticmethod
    def _key(record: Dict[str, Any], key_fields: List[str]) -> tuple:
        return tuple(record.get(k) for k in key_fields)

    async def update_records(self, name: str, key_fields: List[str], records: List[Dict[str, Any]]) -> int:
        table = self._table(name)
        columns = self._columns(name)
        changes = {self._key(r, key_fields): r for r in records}
        updated = 0
        for row in table:
            change = changes.get(self._key(row, key_fields))
            if change is not None:
                row.update({c: change.get(c) for c in columns if c in change})
                updated += 1
        self.operations.append(('update', name))
        return updated

    async def delete_records(self, name: str, key_fields: List[str], records: List[Dict[str, Any]]) -> int:
        table = self._table(name)
        keys = {self._key(r, key_fields) for r in records}
        kept = [row for row in table if self._key(row, key_fields) not in keys]
        deleted = len(table) - len(kept)
        self.tables[name] = kept
        self.operations.append(('delete', name))
        return deleted

    async def close(self):
        self.closed = True
