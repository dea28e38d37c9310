# seeder/dependencies/registry.py

from .rules import DependencyRule
from ..schema.model import ReferenceType


DEPENDENCY_RULES = [

    # -------------------------
    # Belongs edges: the target must already hold records to sample from.
    # Self references are exempt, otherwise they could never be placed.
    # -------------------------
    DependencyRule(reference_type=ReferenceType.BELONGS_TO_ONE),
    DependencyRule(reference_type=ReferenceType.BELONGS_TO_MANY),

    # -------------------------
    # hasOne creates the target record inline, so its table must exist first
    # -------------------------
    DependencyRule(
        reference_type=ReferenceType.HAS_ONE,
        skip_self=False,
        known_targets_only=False,
    ),

]
