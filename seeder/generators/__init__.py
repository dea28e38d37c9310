"""
Data Generators Module

Provides the generators used during seeding:
- FieldSynthesizer: Faker-backed values for plain field types
- RecordGenerator: per-entity record generation with relationship fan-out
"""

from .synthesizer import FieldSynthesizer, DEFAULT_FIELD_TYPES, SEQUENCE_TYPE, SPACE_TYPE
from .record import RecordGenerator

__all__ = [
    "FieldSynthesizer",
    "DEFAULT_FIELD_TYPES",
    "SEQUENCE_TYPE",
    "SPACE_TYPE",
    "RecordGenerator",
]
