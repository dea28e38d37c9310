"""
Schema Data Model

Typed view of the declarative entity schema:
- Entity: a named collection definition (maps to a table)
- Field / ReferenceField: scalar and relationship fields
- Constraints: primary key and uniqueness declarations
"""

from typing import Dict, List, Any, Optional, Union
from dataclasses import dataclass, field
from enum import Enum
import logging

from ..exceptions import SchemaError

logger = logging.getLogger(__name__)

REFERENCE_TYPE_NAME = "reference"


class ReferenceType(Enum):
    """Relationship kinds a reference field can declare"""
    HAS_ONE = "hasOne"
    BELONGS_TO_ONE = "belongsToOne"
    HAS_MANY = "hasMany"
    BELONGS_TO_MANY = "belongsToMany"

    @property
    def is_to_many(self) -> bool:
        return self in (ReferenceType.HAS_MANY, ReferenceType.BELONGS_TO_MANY)

    @property
    def is_belongs(self) -> bool:
        return self in (ReferenceType.BELONGS_TO_ONE, ReferenceType.BELONGS_TO_MANY)


class OnDelete(Enum):
    """Delete policy passed through to the backend"""
    CASCADE = "cascade"
    NULL = "null"


@dataclass
class Constraints:
    """Primary key and unique constraints of an entity"""
    primary_key: List[str] = field(default_factory=list)
    unique: List[Union[str, List[str]]] = field(default_factory=list)

    def unique_fields(self) -> List[str]:
        """Flattened list of every field taking part in a unique or primary key constraint"""
        names: List[str] = list(self.primary_key)
        for entry in self.unique:
            if isinstance(entry, (list, tuple)):
                names.extend(entry)
            else:
                names.append(entry)
        return names

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.primary_key:
            result['primaryKey'] = list(self.primary_key)
        if self.unique:
            result['unique'] = [list(u) if isinstance(u, (list, tuple)) else u for u in self.unique]
        return result


@dataclass
class Field:
    """Scalar field: one type name or a sequence of type names concatenated"""
    name: str
    type: Union[str, List[str]]

    @property
    def types(self) -> List[str]:
        if isinstance(self.type, (list, tuple)):
            return list(self.type)
        return [self.type]

    @property
    def is_reference(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {'type': list(self.type) if isinstance(self.type, (list, tuple)) else self.type}


@dataclass
class ReferenceField(Field):
    """Field whose value is derived from records of another entity"""
    reference_type: ReferenceType = ReferenceType.BELONGS_TO_ONE
    entity: str = ""
    field: str = ""
    count_min: Optional[int] = None
    count_max: Optional[int] = None
    on_delete: Optional[OnDelete] = None
    where: Optional[Dict[str, Any]] = None

    @property
    def is_reference(self) -> bool:
        return True

    @property
    def count_range(self) -> tuple:
        """Inclusive (min, max) draw range for to-many relations"""
        low = self.count_min if self.count_min is not None else 0
        high = self.count_max if self.count_max is not None else 1
        return low, max(low, high)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'type': REFERENCE_TYPE_NAME,
            'referenceType': self.reference_type.value,
            'entity': self.entity,
            'field': self.field,
        }
        if self.count_min is not None or self.count_max is not None:
            result['count'] = {k: v for k, v in (('min', self.count_min), ('max', self.count_max)) if v is not None}
        if self.on_delete is not None:
            result['onDelete'] = self.on_delete.value
        if self.where:
            result['where'] = dict(self.where)
        return result


@dataclass
class Entity:
    """A named collection definition"""
    name: str
    fields: Dict[str, Field] = field(default_factory=dict)
    constraints: Constraints = field(default_factory=Constraints)
    count: int = 0

    @property
    def primary_key(self) -> List[str]:
        return self.constraints.primary_key

    def reference_fields(self) -> Dict[str, ReferenceField]:
        return {name: f for name, f in self.fields.items() if isinstance(f, ReferenceField)}

    def plain_fields(self) -> Dict[str, Field]:
        return {name: f for name, f in self.fields.items() if not isinstance(f, ReferenceField)}

    def is_unique_field(self, field_name: str) -> bool:
        return field_name in self.constraints.unique_fields()

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the raw schema shape"""
        result: Dict[str, Any] = {'fields': {name: f.to_dict() for name, f in self.fields.items()}}
        constraints = self.constraints.to_dict()
        if constraints:
            result['constraints'] = constraints
        if self.count:
            result['count'] = self.count
        return result


def _parse_enum(enum_class, value: Any, context: str):
    try:
        return enum_class(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_class)
        raise SchemaError(f"{context}: invalid value {value!r}, expected one of: {allowed}")


def parse_field(entity_name: str, field_name: str, raw: Dict[str, Any]) -> Field:
    """
    Build a typed field from its raw definition

    Args:
        entity_name: Owning entity (for error messages)
        field_name: Name of the field
        raw: Raw field mapping

    Returns:
        Field or ReferenceField
    """
    context = f"{entity_name}.{field_name}"
    if not isinstance(raw, dict) or 'type' not in raw:
        raise SchemaError(f"{context}: field definition must be a mapping with a 'type'")

    field_type = raw['type']
    if field_type != REFERENCE_TYPE_NAME:
        if isinstance(field_type, (list, tuple)):
            if not field_type:
                raise SchemaError(f"{context}: composite type list cannot be empty")
            return Field(name=field_name, type=list(field_type))
        return Field(name=field_name, type=field_type)

    missing = [key for key in ('referenceType', 'entity', 'field') if not raw.get(key)]
    if missing:
        raise SchemaError(f"{context}: reference field is missing {', '.join(missing)}")

    count = raw.get('count') or {}
    on_delete = raw.get('onDelete')

    return ReferenceField(
        name=field_name,
        type=REFERENCE_TYPE_NAME,
        reference_type=_parse_enum(ReferenceType, raw['referenceType'], context),
        entity=raw['entity'],
        field=raw['field'],
        count_min=count.get('min'),
        count_max=count.get('max'),
        on_delete=_parse_enum(OnDelete, on_delete, context) if on_delete else None,
        where=raw.get('where'),
    )


def parse_entity(name: str, raw: Dict[str, Any]) -> Entity:
    """Build a typed entity from its raw definition"""
    if not isinstance(raw, dict):
        raise SchemaError(f"{name}: entity definition must be a mapping")

    raw_constraints = raw.get('constraints') or {}
    constraints = Constraints(
        primary_key=list(raw_constraints.get('primaryKey') or []),
        unique=list(raw_constraints.get('unique') or []),
    )

    fields = {
        field_name: parse_field(name, field_name, field_def)
        for field_name, field_def in (raw.get('fields') or {}).items()
    }

    for key in constraints.primary_key:
        if key not in fields:
            raise SchemaError(f"{name}: primary key field {key!r} is not declared")

    return Entity(name=name, fields=fields, constraints=constraints, count=int(raw.get('count') or 0))


def parse_entities(raw_entities: Dict[str, Dict[str, Any]]) -> Dict[str, Entity]:
    """
    Build the typed entity map from a raw (usually normalized) schema

    Args:
        raw_entities: Mapping of entity name -> raw definition

    Returns:
        Mapping of entity name -> Entity, in input order
    """
    entities = {name: parse_entity(name, raw) for name, raw in raw_entities.items()}
    logger.debug(f"Parsed {len(entities)} entities")
    return entities
