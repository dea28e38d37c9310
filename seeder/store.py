"""
Record Store Module

Per-entity in-memory record storage for one seeding iteration, the
structural filter predicate used when sampling, and the read-only registry
through which generators reach other entities.
"""

from typing import Dict, List, Any, Optional, Iterator, Tuple, TYPE_CHECKING
import logging
import numpy as np

if TYPE_CHECKING:
    from .generators.record import RecordGenerator

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

_MISSING = object()


def _in(value: Any, expected: Any) -> bool:
    return value in expected


OPERATORS = {
    '$eq': lambda value, expected: value == expected,
    '$ne': lambda value, expected: value != expected,
    '$gt': lambda value, expected: value is not None and value > expected,
    '$gte': lambda value, expected: value is not None and value >= expected,
    '$lt': lambda value, expected: value is not None and value < expected,
    '$lte': lambda value, expected: value is not None and value <= expected,
    '$in': _in,
    '$nin': lambda value, expected: not _in(value, expected),
}


def _is_operator_mapping(condition: Any) -> bool:
    return isinstance(condition, dict) and bool(condition) and all(
        isinstance(key, str) and key.startswith('$') for key in condition
    )


def _check(value: Any, condition: Any) -> bool:
    if not _is_operator_mapping(condition):
        return value is not _MISSING and value == condition

    for op, expected in condition.items():
        if op == '$exists':
            if (value is not _MISSING) != bool(expected):
                return False
            continue
        func = OPERATORS.get(op)
        if func is None:
            raise ValueError(f"Unsupported filter operator: {op}")
        if value is _MISSING:
            # only negative operators hold for a missing field
            if op not in ('$ne', '$nin'):
                return False
            continue
        if not func(value, expected):
            return False
    return True


def matches(record: Record, query: Optional[Dict[str, Any]] = None) -> bool:
    """
    Test a record against a structural filter

    Args:
        record: Record to test
        query: Mapping of field name -> expected value, or field name ->
            operator mapping such as ``{'$gte': 18}``. Empty matches all.

    Returns:
        True if every condition holds
    """
    if not query:
        return True
    return all(_check(record.get(name, _MISSING), condition) for name, condition in query.items())


class RecordStore:
    """
    Holds the records generated for one entity during an iteration
    """

    def __init__(self, name: str):
        self.name = name
        self._records: List[Record] = []

    def __len__(self) -> int:
        return len(self._records)

    def add(self, record: Record):
        self._records.append(record)

    @property
    def records(self) -> List[Record]:
        return self._records

    def filter(self, query: Optional[Dict[str, Any]] = None) -> List[Record]:
        if not query:
            return list(self._records)
        return [record for record in self._records if matches(record, query)]

    def random_record(self, rng: np.random.Generator, query: Optional[Dict[str, Any]] = None) -> Record:
        """
        Draw one matching record uniformly at random

        Returns:
            The record, or an empty dict when nothing matches
        """
        candidates = self.filter(query)
        if not candidates:
            logger.debug(f"No {self.name} record available for query {query}")
            return {}
        return candidates[int(rng.integers(len(candidates)))]

    def random_records(
        self,
        rng: np.random.Generator,
        count: int,
        query: Optional[Dict[str, Any]] = None
    ) -> List[Record]:
        """Draw up to ``count`` distinct matching records without replacement"""
        candidates = self.filter(query)
        size = min(count, len(candidates))
        if size <= 0:
            return []
        picks = rng.choice(len(candidates), size=size, replace=False)
        return [candidates[int(i)] for i in picks]

    def reset(self):
        self._records = []


class EntityRegistry:
    """
    Read-only lookup of entity name -> RecordGenerator

    Built once by the orchestrator and shared by every generator.
    """

    def __init__(self, generators: Optional[Dict[str, "RecordGenerator"]] = None):
        self._generators: Dict[str, "RecordGenerator"] = dict(generators or {})

    def register(self, name: str, generator: "RecordGenerator"):
        self._generators[name] = generator

    def get(self, name: str) -> "RecordGenerator":
        try:
            return self._generators[name]
        except KeyError:
            raise KeyError(f"Entity {name!r} is not part of the schema") from None

    def __contains__(self, name: object) -> bool:
        return name in self._generators

    def __iter__(self) -> Iterator[str]:
        return iter(self._generators)

    def __len__(self) -> int:
        return len(self._generators)

    def names(self) -> List[str]:
        return list(self._generators)

    def items(self) -> List[Tuple[str, "RecordGenerator"]]:
        return list(self._generators.items())
