"""
Backend Interface

Storage backends receive table definitions and batches of records from the
orchestrator. All operations are coroutines and the tables of one dependency
level are handed over together via asyncio.gather; backends with a network
client can overlap them, the bundled ones run them in order.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Union

from .types import map_field_type_to_backend_type


@dataclass
class ColumnDefinition:
    """One backend column"""
    name: str
    db_type: str
    references_entity: Optional[str] = None
    references_field: Optional[str] = None
    on_delete: Optional[str] = None  # 'cascade' | 'null'

    @property
    def is_foreign_key(self) -> bool:
        return self.references_entity is not None


@dataclass
class TableDefinition:
    """Everything a backend needs to create the table of one entity"""
    name: str
    columns: List[ColumnDefinition] = field(default_factory=list)
    primary_key: List[str] = field(default_factory=list)
    unique: List[Union[str, List[str]]] = field(default_factory=list)

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]


class Backend(ABC):
    """
    Abstract storage backend

    Subclasses set ``client`` to the name used for column type mapping.
    """

    client: str = ""

    def map_field_type(self, field_type: str) -> str:
        return map_field_type_to_backend_type(field_type, self.client)

    @abstractmethod
    async def create_table(self, table: TableDefinition):
        """Create the table for one entity"""

    @abstractmethod
    async def drop_table(self, name: str):
        """Drop a table if it exists"""

    @abstractmethod
    async def batch_insert(self, name: str, records: List[Dict[str, Any]]) -> int:
        """Insert records, returning how many were written"""

    @abstractmethod
    async def update_records(self, name: str, key_fields: List[str], records: List[Dict[str, Any]]) -> int:
        """Rewrite records matched by their key fields"""

    @abstractmethod
    async def delete_records(self, name: str, key_fields: List[str], records: List[Dict[str, Any]]) -> int:
        """Delete records matched by their key fields"""

    async def close(self):
        """Release connections"""
