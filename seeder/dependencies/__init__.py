"""
Dependency Module

Orders entities into levels so every record can reference already
generated records of the entities it depends on.
"""

from .rules import DependencyRule
from .registry import DEPENDENCY_RULES
from .resolver import DependencyResolver, DependencyQueue, QueueEntry

__all__ = [
    "DependencyRule",
    "DEPENDENCY_RULES",
    "DependencyResolver",
    "DependencyQueue",
    "QueueEntry",
]
