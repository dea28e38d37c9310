import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .rules import DependencyRule
from .registry import DEPENDENCY_RULES
from ..exceptions import CyclicDependencyError
from ..schema.model import Entity

logger = logging.getLogger(__name__)


@dataclass
class QueueEntry:
    name: str
    entity: Entity


DependencyQueue = List[List[QueueEntry]]


class DependencyResolver:

    def __init__(self, rules: Optional[List[DependencyRule]] = None):
        if rules is None:
            rules = DEPENDENCY_RULES
        self.rules = {rule.reference_type: rule for rule in rules}

    def dependencies(self, name: str, entity: Entity, known: set) -> List[str]:
        """Names of the entities ``entity`` must be generated after"""
        deps: List[str] = []
        for field in entity.reference_fields().values():
            rule = self.rules.get(field.reference_type)
            if rule is None:
                continue
            if rule.skip_self and field.entity == name:
                continue
            if rule.known_targets_only and field.entity not in known:
                continue
            if field.entity not in deps:
                deps.append(field.entity)
        return deps

    def resolve(self, entities: Dict[str, Entity]) -> DependencyQueue:
        """
        Order entities into levels

        Each pass places every entity whose dependencies all sit in earlier
        levels. A pass that places nothing while entities remain means the
        graph cannot be ordered.
        """
        known = set(entities)
        pending = {
            name: (entity, self.dependencies(name, entity, known))
            for name, entity in entities.items()
        }
        placed: set = set()
        queue: DependencyQueue = []

        while pending:
            level = [
                QueueEntry(name, entity)
                for name, (entity, deps) in pending.items()
                if placed.issuperset(deps)
            ]

            if not level:
                unresolved = {
                    name: [d for d in deps if d not in placed]
                    for name, (_, deps) in pending.items()
                }
                logger.error(f"Cannot order entities: {unresolved}")
                raise CyclicDependencyError(unresolved)

            for entry in level:
                del pending[entry.name]
                placed.add(entry.name)
            queue.append(level)

        logger.debug(f"Resolved {len(entities)} entities into {len(queue)} levels")
        return queue
