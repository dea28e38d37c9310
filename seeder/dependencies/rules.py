from dataclasses import dataclass

from ..schema.model import ReferenceType


@dataclass
class DependencyRule:
    """
    Declares that a reference kind is a hard generation dependency

    skip_self: ignore references pointing back at the owning entity
    known_targets_only: ignore references to entities outside the resolved set
    """
    reference_type: ReferenceType
    skip_self: bool = True
    known_targets_only: bool = True
