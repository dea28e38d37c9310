"""
Seeding Orchestrator Module

Drives a seeding run: normalizes the schema, orders entities into
dependency levels, then generates records level by level and flushes them
to the backend, once per iteration. The continuous phase keeps mutating the
dataset with randomized inserts, updates and deletes.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .backends import Backend, create_backend
from .config import SeederConfig, ConfigValidator
from .dependencies import DependencyResolver, DependencyQueue
from .exceptions import ConfigError
from .generators import FieldSynthesizer, RecordGenerator
from .schema import Entity, normalize, parse_entities
from .store import EntityRegistry, Record
from .utils import FileHandler, SeedManager

logger = logging.getLogger(__name__)

UPDATE_PROBABILITY = 0.3
DELETE_THRESHOLD = 0.7
CONTINUOUS_MAX_COUNT = 5


class SeederState(Enum):
    """Lifecycle of a seeding run"""
    IDLE = "idle"
    CREATING_SCHEMA = "creating_schema"
    SEEDING_INITIAL = "seeding_initial"
    SEEDING_CONTINUOUS = "seeding_continuous"
    DONE = "done"


@dataclass
class QueuedRecord:
    """A generated record picked for a later update or delete"""
    entity: str
    record: Record


class Seeder:
    """
    Main orchestrator for relational seeding

    Coordinates schema normalization, dependency resolution, record
    generation and backend flushes
    """

    def __init__(
        self,
        config: SeederConfig,
        backend: Optional[Backend] = None,
        dump_directory: Optional[Union[str, Path]] = None
    ):
        """
        Initialize the seeder

        Args:
            config: Seed configuration
            backend: Storage backend (built from config.connection if None)
            dump_directory: Write each pass's records to ``<dump_directory>/pass_<n>``
                before they are cleared
        """
        if backend is None:
            backend = create_backend(
                config.connection.client,
                config.connection.connection,
                batch_size=config.batch_size,
            )

        is_valid, errors = ConfigValidator.validate(config, check_client=False)
        if not is_valid:
            raise ConfigError("Invalid configuration: " + "; ".join(errors))

        self.config = config
        self.backend = backend
        self.dump_directory = Path(dump_directory) if dump_directory else None
        self.pass_count = 0
        self.state = SeederState.IDLE

        seed_manager = SeedManager(config.seed, config.locale)
        seed_manager.set_seed()
        self.rng = seed_manager.create_rng()
        self.synthesizer = FieldSynthesizer(seed_manager.create_faker(), self.rng)

        self.update_queue: List[QueuedRecord] = []
        self.delete_queue: List[QueuedRecord] = []
        self.inserted: Dict[str, int] = {}

        self.parse_schema()
        logger.info(
            f"Dependency queue: {[[entry.name for entry in level] for level in self.dependency_queue]}"
        )
        self.create_seeder_entities()

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def parse_schema(self):
        self.normalized_schema = normalize(self.config.schema)
        self.entities: Dict[str, Entity] = parse_entities(self.normalized_schema)
        self.dependency_queue: DependencyQueue = DependencyResolver().resolve(self.entities)
        self.deletable_entities = self._find_deletable_entities()

    def _find_deletable_entities(self) -> set:
        """Entities with a key whose every incoming reference declares onDelete"""
        blocked = set()
        for entity in self.entities.values():
            for field in entity.reference_fields().values():
                if not field.reference_type.is_to_many and field.on_delete is None:
                    blocked.add(field.entity)
        return {
            name for name, entity in self.entities.items()
            if entity.primary_key and name not in blocked
        }

    def create_seeder_entities(self):
        self.registry = EntityRegistry()
        for name, entity in self.entities.items():
            self.registry.register(name, RecordGenerator(
                name,
                entity,
                self.registry,
                self.synthesizer,
                rng=self.rng,
                map_field_type=self.backend.map_field_type,
            ))

    def validate(self):
        """Check every field type before anything touches the backend"""
        for _, generator in self.registry.items():
            generator.validate()

    def _levels(self):
        for level in self.dependency_queue:
            yield [(entry.name, self.registry.get(entry.name)) for entry in level]

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def start(self) -> Dict[str, int]:
        """
        Run a full seeding: create tables, initial passes, continuous passes

        Returns:
            Rows inserted per entity
        """
        try:
            self.validate()
            await self.create_tables()
            await self.seed_initial_data(self.config.iterations)
            if self.config.continuous_iterations is not None:
                await self.seed_continuous_data(self.config.continuous_iterations)
            self.state = SeederState.DONE
            logger.info(f"Seeding complete: {self.inserted}")
            return dict(self.inserted)
        finally:
            await self.backend.close()

    async def create_tables(self):
        self.state = SeederState.CREATING_SCHEMA

        if self.config.drop_existing:
            for level in reversed(self.dependency_queue):
                await asyncio.gather(*(self.backend.drop_table(entry.name) for entry in level))

        for level in self._levels():
            await asyncio.gather(*(
                self.backend.create_table(generator.table_definition()) for _, generator in level
            ))
        logger.info(f"Tables created: {len(self.entities)}")

    async def seed_initial_data(self, count: int):
        """Run ``count`` passes generating each entity's configured count"""
        self.state = SeederState.SEEDING_INITIAL

        for pass_index in range(count):
            logger.info(f"Initial seeding, pending iterations: {count - pass_index}")
            for level in self._levels():
                for name, generator in level:
                    for _ in range(generator.entity.count):
                        generator.generate()
            await self._complete_pass()

        logger.info(f"Initial seed complete: {', '.join(self.registry.names())}")

    async def seed_continuous_data(
        self,
        count: int,
        update_queue: Optional[List[QueuedRecord]] = None,
        delete_queue: Optional[List[QueuedRecord]] = None
    ) -> Tuple[List[QueuedRecord], List[QueuedRecord]]:
        """
        Run ``count + 1`` continuous passes

        Args:
            count: Passes after the first one
            update_queue: Accumulated update candidates (the seeder's own if None)
            delete_queue: Accumulated delete candidates (the seeder's own if None)

        Returns:
            The update and delete queues
        """
        self.state = SeederState.SEEDING_CONTINUOUS
        update_queue = self.update_queue if update_queue is None else update_queue
        delete_queue = self.delete_queue if delete_queue is None else delete_queue

        for pass_index in range(count + 1):
            if pass_index:
                await asyncio.sleep(self.config.continuous_delay)
            logger.info(f"Continuous seeding, pending iterations: {count - pass_index}")

            updates, deletes = self._generate_continuous_pass()
            await self.flush_to_tables()
            await self.apply_updates(updates)
            await self.apply_deletes(deletes)
            update_queue.extend(updates)
            delete_queue.extend(deletes)
            self._dump()
            self.reset_records()

        logger.info(f"Continuous seed complete: {', '.join(self.registry.names())}")
        return update_queue, delete_queue

    def _generate_continuous_pass(self) -> Tuple[List[QueuedRecord], List[QueuedRecord]]:
        updates: List[QueuedRecord] = []
        deletes: List[QueuedRecord] = []
        stop = False

        for level in self._levels():
            if stop:
                break
            for name, generator in level:
                has_count = bool(generator.entity.count)
                entity_count = int(self.rng.integers(0, CONTINUOUS_MAX_COUNT + 1)) if has_count else 0
                if has_count and not entity_count:
                    # dependents further down would have no fresh parents
                    stop = True
                for _ in range(entity_count):
                    record = generator.generate()
                    draw = self.rng.random()
                    if draw <= UPDATE_PROBABILITY:
                        updates.append(QueuedRecord(name, record))
                    elif draw >= DELETE_THRESHOLD:
                        deletes.append(QueuedRecord(name, record))
                logger.debug(f"Continuous pass: {entity_count} {name} records")

        return updates, deletes

    # ------------------------------------------------------------------
    # Backend writes
    # ------------------------------------------------------------------

    async def _complete_pass(self):
        await self.flush_to_tables()
        self._dump()
        self.reset_records()

    async def flush_to_tables(self):
        """Insert held records level by level; a level's entities flush concurrently"""
        for level in self._levels():
            pending = [(name, generator.get_records()) for name, generator in level]
            pending = [(name, records) for name, records in pending if records]
            counts = await asyncio.gather(*(
                self.backend.batch_insert(name, records) for name, records in pending
            ))
            for (name, _), inserted in zip(pending, counts):
                self.inserted[name] = self.inserted.get(name, 0) + inserted
                logger.debug(f"Flushed {inserted} {name} records")

    @staticmethod
    def _group(candidates: List[QueuedRecord]) -> Dict[str, List[Record]]:
        grouped: Dict[str, List[Record]] = {}
        for item in candidates:
            grouped.setdefault(item.entity, []).append(item.record)
        return grouped

    async def apply_updates(self, candidates: List[QueuedRecord]) -> int:
        """Regenerate the updatable fields of the candidates and write them back"""
        total = 0
        for name, records in self._group(candidates).items():
            generator = self.registry.get(name)
            key_fields = generator.entity.primary_key
            if not key_fields:
                logger.debug(f"Skipping updates for {name}: no primary key")
                continue
            changed = [generator.mutate_record(record) for record in records]
            total += await self.backend.update_records(name, key_fields, changed)
        if total:
            logger.debug(f"Updated {total} records")
        return total

    async def apply_deletes(self, candidates: List[QueuedRecord]) -> int:
        """Delete candidates, children before parents"""
        grouped = self._group(candidates)
        total = 0
        for level in reversed(self.dependency_queue):
            for entry in level:
                records = grouped.get(entry.name)
                if not records:
                    continue
                if entry.name not in self.deletable_entities:
                    logger.debug(f"Skipping deletes for {entry.name}: not safely deletable")
                    continue
                total += await self.backend.delete_records(entry.name, entry.entity.primary_key, records)
        if total:
            logger.debug(f"Deleted {total} records")
        return total

    def reset_records(self):
        for _, generator in self.registry.items():
            generator.reset_records()

    # ------------------------------------------------------------------
    # Accessors / output
    # ------------------------------------------------------------------

    def get_records(self, entity_name: str) -> List[Record]:
        return self.registry.get(entity_name).get_records()

    def save_all_records_to_files(self, directory: Union[str, Path], fmt: str = "json") -> List[Path]:
        """
        Write the records currently held, one file per entity

        Args:
            directory: Output directory
            fmt: 'json' or 'csv'

        Returns:
            Written paths
        """
        if fmt not in FileHandler.SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported file format: {fmt}")
        directory = Path(directory)
        return [
            FileHandler.write_records(generator.get_records(), directory / f"{name}.{fmt}")
            for name, generator in self.registry.items()
        ]

    def _dump(self):
        """Count the finished pass and write its records to its own directory"""
        self.pass_count += 1
        if self.dump_directory is not None:
            self.save_all_records_to_files(self.dump_directory / f"pass_{self.pass_count}")
