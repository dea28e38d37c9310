"""
Relational Seeder Package

Populates relational databases with realistic, referentially consistent
synthetic records from a declarative entity schema, either once or as a
continuous stream of inserts, updates and deletes.
"""

__version__ = "1.0.0"

from .config import SeederConfig, ConnectionConfig, ConfigLoader, ConfigValidator
from .seeder import Seeder, SeederState, QueuedRecord
from .backends import Backend, InMemoryBackend, SQLiteBackend, create_backend
from .exceptions import (
    SeederError,
    SchemaError,
    ConfigError,
    UnsupportedBackendError,
    CyclicDependencyError,
    UnknownFieldTypeError,
)

__all__ = [
    "SeederConfig",
    "ConnectionConfig",
    "ConfigLoader",
    "ConfigValidator",
    "Seeder",
    "SeederState",
    "QueuedRecord",
    "Backend",
    "InMemoryBackend",
    "SQLiteBackend",
    "create_backend",
    "SeederError",
    "SchemaError",
    "ConfigError",
    "UnsupportedBackendError",
    "CyclicDependencyError",
    "UnknownFieldTypeError",
]
