"""
Schema Module

Typed entity model and the normalizer that synthesizes junction entities
for to-many relationships.
"""

from .model import (
    Entity,
    Field,
    ReferenceField,
    Constraints,
    ReferenceType,
    OnDelete,
    parse_entity,
    parse_entities,
)
from .normalizer import normalize, junction_name

__all__ = [
    "Entity",
    "Field",
    "ReferenceField",
    "Constraints",
    "ReferenceType",
    "OnDelete",
    "parse_entity",
    "parse_entities",
    "normalize",
    "junction_name",
]
