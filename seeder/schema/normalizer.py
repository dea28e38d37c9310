"""
Schema Normalizer

Expands a raw entity map into a fully normalized one: every hasMany or
belongsToMany relationship gets a junction entity holding the foreign keys
of both sides.
"""

from typing import Dict, Any
import logging

from ..utils import deep_merge
from .model import REFERENCE_TYPE_NAME

logger = logging.getLogger(__name__)

TO_MANY_REFERENCE_TYPES = ('hasMany', 'belongsToMany')


def junction_name(target_entity: str, owner_entity: str) -> str:
    """Name of the junction entity linking ``owner_entity`` to ``target_entity``"""
    return f"{target_entity}_{owner_entity}"


def _belongs_to_one(entity: str, field: str, on_delete: Any) -> Dict[str, Any]:
    definition = {
        'type': REFERENCE_TYPE_NAME,
        'referenceType': 'belongsToOne',
        'entity': entity,
        'field': field,
    }
    if on_delete is not None:
        definition['onDelete'] = on_delete
    return definition


def _junction_fields(owner: str, owner_def: Dict[str, Any], reference: Dict[str, Any]) -> Dict[str, Any]:
    target = reference['entity']
    target_field = reference['field']
    on_delete = reference.get('onDelete')

    fields = {f"{target}_{target_field}": _belongs_to_one(target, target_field, on_delete)}
    primary_key = (owner_def.get('constraints') or {}).get('primaryKey') or []
    for key in primary_key:
        fields[f"{owner}_{key}"] = _belongs_to_one(owner, key, on_delete)
    return fields


def normalize(raw_entities: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """
    Normalize a raw entity map

    Args:
        raw_entities: Mapping of entity name -> raw entity definition

    Returns:
        New mapping including synthesized junction entities. The input is
        left untouched and normalizing the result again yields an equal map.
    """
    normalized: Dict[str, Dict[str, Any]] = {}

    for name, entity in raw_entities.items():
        normalized[name] = deep_merge(normalized.get(name), entity)

        for field_def in (entity.get('fields') or {}).values():
            if not isinstance(field_def, dict) or field_def.get('type') != REFERENCE_TYPE_NAME:
                continue
            if field_def.get('entity') == name:
                continue
            if field_def.get('referenceType') not in TO_MANY_REFERENCE_TYPES:
                continue

            junction = junction_name(field_def['entity'], name)
            normalized[junction] = deep_merge(
                normalized.get(junction),
                {'fields': _junction_fields(name, entity, field_def)},
            )
            logger.debug(f"Junction entity {junction} for {name} -> {field_def['entity']}")

    added = len(normalized) - len(raw_entities)
    if added:
        logger.info(f"Normalized schema: {len(normalized)} entities ({added} junction entities added)")
    return normalized
