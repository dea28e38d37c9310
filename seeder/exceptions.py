"""
Seeder Exceptions

All errors raised by the seeding engine derive from SeederError so callers
can catch the whole family at the top level.
"""

from typing import Dict, List, Optional


class SeederError(Exception):
    """Base class for seeding errors"""


class SchemaError(SeederError):
    """Raised when an entity definition cannot be interpreted"""


class ConfigError(SeederError):
    """Raised when a seed configuration is missing or invalid"""


class UnsupportedBackendError(SeederError):
    """Raised when the configured backend client is not recognized"""

    def __init__(self, client: str, reason: Optional[str] = None):
        self.client = client
        message = f"Unsupported backend client: {client!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class CyclicDependencyError(SeederError):
    """
    Raised when entities cannot be ordered

    Attributes:
        unresolved: Mapping of entity name -> dependencies never satisfied
    """

    def __init__(self, unresolved: Dict[str, List[str]]):
        self.unresolved = unresolved
        details = ", ".join(
            f"{name} -> [{', '.join(deps)}]" for name, deps in unresolved.items()
        )
        super().__init__(f"Cyclic or unresolvable entity dependencies: {details}")


class UnknownFieldTypeError(SeederError, KeyError):
    """Raised when no synthesizer is registered for a field type"""

    def __init__(self, type_name: str, entity: Optional[str] = None, field: Optional[str] = None):
        self.type_name = type_name
        self.entity = entity
        self.field = field
        location = f" (field {entity}.{field})" if entity and field else ""
        super().__init__(f"Unknown field type: {type_name!r}{location}")

    def __str__(self) -> str:
        # KeyError would otherwise wrap the message in quotes
        return self.args[0]
