"""
SQLite backend

Creates one table per entity and writes records with chunked executemany.
"""

import logging
import sqlite3
from datetime import date, datetime, time
from typing import Dict, List, Any, Optional

from .base import Backend, TableDefinition, ColumnDefinition

logger = logging.getLogger(__name__)

ON_DELETE_CLAUSES = {
    'cascade': 'ON DELETE CASCADE',
    'null': 'ON DELETE SET NULL',
}


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def _to_sql_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    return value


class SQLiteBackend(Backend):
    """
    Backend writing to a SQLite database file (or ':memory:')

    All statements run on one connection from the event loop thread, so the
    coroutines never yield: calls gathered for a dependency level execute
    one after another, in submission order. Each call commits on return.
    """

    client = "sqlite"

    def __init__(self, database: str = ":memory:", batch_size: int = 500):
        self.database = database
        self.batch_size = batch_size
        self.definitions: Dict[str, TableDefinition] = {}
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.database)
            self._conn.execute("PRAGMA foreign_keys = ON;")
        return self._conn

    def _can_reference(self, table: TableDefinition, column: ColumnDefinition) -> bool:
        # SQLite only accepts foreign keys onto a primary key or unique column
        target = table if column.references_entity == table.name else self.definitions.get(column.references_entity)
        if target is None:
            return False
        if target.primary_key == [column.references_field]:
            return True
        return column.references_field in target.unique or [column.references_field] in target.unique

    def create_table_sql(self, table: TableDefinition) -> str:
        defs = [f"{_quote(c.name)} {c.db_type}" for c in table.columns]

        if table.primary_key:
            defs.append(f"PRIMARY KEY ({', '.join(_quote(k) for k in table.primary_key)})")

        for entry in table.unique:
            cols = entry if isinstance(entry, (list, tuple)) else [entry]
            defs.append(f"UNIQUE ({', '.join(_quote(c) for c in cols)})")

        for column in table.columns:
            if not column.is_foreign_key:
                continue
            if not self._can_reference(table, column):
                logger.debug(
                    f"Skipping foreign key {table.name}.{column.name} -> "
                    f"{column.references_entity}.{column.references_field} (target not a key)"
                )
                continue
            clause = (
                f"FOREIGN KEY ({_quote(column.name)}) REFERENCES "
                f"{_quote(column.references_entity)}({_quote(column.references_field)})"
            )
            if column.on_delete in ON_DELETE_CLAUSES:
                clause = f"{clause} {ON_DELETE_CLAUSES[column.on_delete]}"
            defs.append(clause)

        return f"CREATE TABLE IF NOT EXISTS {_quote(table.name)} (\n  " + ",\n  ".join(defs) + "\n);"

    async def create_table(self, table: TableDefinition):
        self.definitions[table.name] = table
        sql = self.create_table_sql(table)
        with self.connection as conn:
            conn.execute(sql)
        logger.debug(f"Created table {table.name}")

    async def drop_table(self, name: str):
        self.definitions.pop(name, None)
        with self.connection as conn:
            conn.execute(f"DROP TABLE IF EXISTS {_quote(name)};")
        logger.debug(f"Dropped table {name}")

    def _columns(self, name: str) -> List[str]:
        if name not in self.definitions:
            raise KeyError(f"Table {name!r} was not created by this backend")
        return self.definitions[name].column_names

    def _executemany_chunked(self, sql: str, rows: List[List[Any]]) -> int:
        total = 0
        with self.connection as conn:
            for start in range(0, len(rows), self.batch_size):
                batch = rows[start:start + self.batch_size]
                conn.executemany(sql, batch)
                total += len(batch)
        return total

    async def batch_insert(self, name: str, records: List[Dict[str, Any]]) -> int:
        if not records:
            return 0
        cols = self._columns(name)
        placeholders = ", ".join(["?"] * len(cols))
        sql = f"INSERT INTO {_quote(name)} ({', '.join(_quote(c) for c in cols)}) VALUES ({placeholders});"
        rows = [[_to_sql_value(r.get(c)) for c in cols] for r in records]
        total = self._executemany_chunked(sql, rows)
        logger.debug(f"Inserted {total} rows into {name}")
        return total

    async def update_records(self, name: str, key_fields: List[str], records: List[Dict[str, Any]]) -> int:
        if not records:
            return 0
        cols = [c for c in self._columns(name) if c not in key_fields]
        if not cols:
            return 0
        assignments = ", ".join(f"{_quote(c)} = ?" for c in cols)
        condition = " AND ".join(f"{_quote(k)} = ?" for k in key_fields)
        sql = f"UPDATE {_quote(name)} SET {assignments} WHERE {condition};"
        rows = [[_to_sql_value(r.get(c)) for c in cols + key_fields] for r in records]
        return self._executemany_chunked(sql, rows)

    async def delete_records(self, name: str, key_fields: List[str], records: List[Dict[str, Any]]) -> int:
        if not records:
            return 0
        condition = " AND ".join(f"{_quote(k)} = ?" for k in key_fields)
        sql = f"DELETE FROM {_quote(name)} WHERE {condition};"
        rows = [[_to_sql_value(r.get(k)) for k in key_fields] for r in records]
        return self._executemany_chunked(sql, rows)

    def fetch_all(self, name: str) -> List[Dict[str, Any]]:
        """Read a table back as records"""
        cursor = self.connection.execute(f"SELECT * FROM {_quote(name)};")
        columns = [d[0] for d in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    async def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None
