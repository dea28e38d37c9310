"""
Record Generator

Produces records for one entity. Plain fields come from the synthesizer,
to-one references read from other entities' stores, and to-many references
recursively generate (or sample) related records plus one junction record
per related record.
"""

from typing import Dict, List, Any, Optional, Callable
import logging
import numpy as np

from ..exceptions import UnknownFieldTypeError
from ..schema.model import Entity, Field, ReferenceField, ReferenceType
from ..schema.normalizer import junction_name
from ..store import RecordStore, EntityRegistry, Record
from ..backends.base import ColumnDefinition, TableDefinition
from ..backends.types import map_field_type_to_backend_type
from .synthesizer import FieldSynthesizer, SEQUENCE_TYPE, SPACE_TYPE

logger = logging.getLogger(__name__)


class RecordGenerator:
    """
    Generates and holds the records of one entity

    The records live in a RecordStore for the duration of one seeding
    iteration. Sequence counters survive reset_records() so sequence values
    never repeat within a run.
    """

    def __init__(
        self,
        name: str,
        entity: Entity,
        registry: EntityRegistry,
        synthesizer: FieldSynthesizer,
        rng: Optional[np.random.Generator] = None,
        map_field_type: Optional[Callable[[str], str]] = None
    ):
        """
        Initialize the generator

        Args:
            name: Entity name
            entity: Normalized entity definition
            registry: Lookup of the other entities' generators
            synthesizer: Field value synthesizer
            rng: Random generator for sampling and counts (synthesizer's if None)
            map_field_type: Field type -> backend column type function
        """
        self.name = name
        self.entity = entity
        self.registry = registry
        self.synthesizer = synthesizer
        self.rng = rng if rng is not None else synthesizer.rng
        self.map_field_type = map_field_type or (lambda t: map_field_type_to_backend_type(t, 'memory'))
        self.store = RecordStore(name)
        self.sequence_counter: Dict[str, int] = {
            field_name: 1
            for field_name, field in entity.plain_fields().items()
            if SEQUENCE_TYPE in field.types
        }

    def __repr__(self) -> str:
        return f"RecordGenerator({self.name!r}, records={len(self.store)})"

    # ------------------------------------------------------------------
    # Store access
    # ------------------------------------------------------------------

    def get_random_record(self, query: Optional[Dict[str, Any]] = None) -> Record:
        """Random record matching ``query``, or an empty dict if none does"""
        return self.store.random_record(self.rng, query)

    def get_random_records(self, count: int, query: Optional[Dict[str, Any]] = None) -> List[Record]:
        return self.store.random_records(self.rng, count, query)

    def get_records(self) -> List[Record]:
        return self.store.records

    def reset_records(self):
        self.store.reset()

    # ------------------------------------------------------------------
    # Backend description
    # ------------------------------------------------------------------

    def get_field_db_type(self, field_name: str) -> str:
        """Backend column type of a field; references use their target's type"""
        field = self.entity.fields[field_name]
        if isinstance(field, ReferenceField):
            return self.registry.get(field.entity).get_field_db_type(field.field)
        types = field.types
        # composite values are concatenated strings
        return self.map_field_type(types[0] if len(types) == 1 else 'string')

    def table_definition(self) -> TableDefinition:
        columns = []
        for field_name, field in self.entity.fields.items():
            if isinstance(field, ReferenceField):
                if field.reference_type.is_to_many:
                    continue
                columns.append(ColumnDefinition(
                    name=field_name,
                    db_type=self.get_field_db_type(field_name),
                    references_entity=field.entity,
                    references_field=field.field,
                    on_delete=field.on_delete.value if field.on_delete else None,
                ))
            else:
                columns.append(ColumnDefinition(name=field_name, db_type=self.get_field_db_type(field_name)))

        return TableDefinition(
            name=self.name,
            columns=columns,
            primary_key=list(self.entity.constraints.primary_key),
            unique=list(self.entity.constraints.unique),
        )

    def validate(self):
        """Fail early on field types the synthesizer does not know"""
        for field_name, field in self.entity.plain_fields().items():
            for type_name in field.types:
                if not self.synthesizer.has_type(type_name):
                    raise UnknownFieldTypeError(type_name, self.name, field_name)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def primary_key_data(self, record: Record) -> Record:
        """Owner key values as they appear in junction records"""
        return {f"{self.name}_{key}": record.get(key) for key in self.entity.constraints.primary_key}

    def _resolve_type(self, field_name: str, type_name: str) -> Any:
        if type_name == SEQUENCE_TYPE:
            value = self.sequence_counter.get(field_name, 1)
            self.sequence_counter[field_name] = value + 1
            return value
        if type_name == SPACE_TYPE:
            return ' '

        try:
            value = self.synthesizer.synthesize(type_name)
        except UnknownFieldTypeError:
            raise UnknownFieldTypeError(type_name, self.name, field_name) from None

        if self.entity.is_unique_field(field_name):
            return f"{self.synthesizer.unique_token()}{value}"
        return value

    def resolve_plain_field(self, field_name: str, field: Field) -> Any:
        values = [self._resolve_type(field_name, type_name) for type_name in field.types]
        if len(values) == 1:
            return values[0]
        return "".join(str(v) for v in values)

    def _generate_to_many(self, field: ReferenceField, record: Record) -> List[Record]:
        junction = junction_name(field.entity, self.name)
        if junction not in self.registry:
            logger.debug(f"{self.name}: no junction entity {junction}, skipping relation")
            return []

        low, high = field.count_range
        count = int(self.rng.integers(low, high + 1))
        target = self.registry.get(field.entity)

        if field.reference_type == ReferenceType.HAS_MANY:
            related = [target.generate() for _ in range(count)]
        else:
            related = target.get_random_records(count, field.where)

        owner_key = self.primary_key_data(record)
        junction_generator = self.registry.get(junction)
        for item in related:
            junction_generator.generate({f"{field.entity}_{field.field}": item.get(field.field), **owner_key})

        return related

    def resolve_reference_field(self, field: ReferenceField, record: Record) -> Any:
        """
        Resolve one reference field

        Returns:
            The copied value for to-one relations; None for to-many relations,
            which live entirely in the junction entity
        """
        if field.reference_type == ReferenceType.HAS_ONE:
            created = self.registry.get(field.entity).generate()
            return created.get(field.field)

        if field.reference_type == ReferenceType.BELONGS_TO_ONE:
            sampled = self.registry.get(field.entity).get_random_record(field.where)
            return sampled.get(field.field)

        self._generate_to_many(field, record)
        return None

    def generate(self, prefill_data: Optional[Record] = None) -> Record:
        """
        Generate one record and add it to the store

        Args:
            prefill_data: Field values to use as-is; they are never regenerated

        Returns:
            The generated record
        """
        data: Record = dict(prefill_data or {})
        pending = {name: f for name, f in self.entity.fields.items() if name not in data}

        for field_name, field in pending.items():
            if not isinstance(field, ReferenceField):
                data[field_name] = self.resolve_plain_field(field_name, field)

        references = {name: f for name, f in pending.items() if isinstance(f, ReferenceField)}
        for field_name, field in references.items():
            if not field.reference_type.is_to_many:
                data[field_name] = self.resolve_reference_field(field, data)

        # junction records copy the owner key, which may include to-one fields
        for field in references.values():
            if field.reference_type.is_to_many:
                self.resolve_reference_field(field, data)

        self.store.add(data)
        return data

    def mutate_record(self, record: Record) -> Record:
        """
        Copy of ``record`` with new values for its updatable fields

        Plain fields outside the primary key and without a sequence type are
        regenerated; keys and references are kept.
        """
        updated = dict(record)
        key_fields = set(self.entity.constraints.primary_key)
        for field_name, field in self.entity.plain_fields().items():
            if field_name in key_fields or SEQUENCE_TYPE in field.types:
                continue
            updated[field_name] = self.resolve_plain_field(field_name, field)
        return updated
