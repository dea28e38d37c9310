"""
Utility Functions Module

Provides essential utilities:
- Record file output (JSON, CSV)
- Logging configuration
- Seed management for reproducibility
- Structural deep merge of schema mappings
"""

import random
import logging
from pathlib import Path
from typing import Dict, List, Optional, Any, Union
from copy import deepcopy
import pandas as pd
import numpy as np
from faker import Faker
from logging.handlers import RotatingFileHandler
from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger(__name__)


class FileHandler:
    """
    Handles file output of generated records

    Supports: JSON, CSV
    """

    SUPPORTED_FORMATS = ('json', 'csv')

    @staticmethod
    def write_records(
        records: List[Dict[str, Any]],
        filepath: Union[str, Path],
        **kwargs
    ) -> Path:
        """
        Write a list of records based on file extension

        Args:
            records: Records to write
            filepath: Output path
            **kwargs: Additional arguments for pandas writers

        Returns:
            The written path
        """
        filepath = Path(filepath)

        # Create directory if needed
        filepath.parent.mkdir(parents=True, exist_ok=True)

        extension = filepath.suffix.lower()
        data = pd.DataFrame.from_records(records)

        try:
            if extension == '.json':
                data.to_json(filepath, orient='records', date_format='iso', **kwargs)
            elif extension == '.csv':
                data.to_csv(filepath, index=False, **kwargs)
            else:
                raise ValueError(f"Unsupported file format: {extension}")

            logger.debug(f"File written successfully: {filepath}")

        except Exception as e:
            logger.error(f"Failed to write {filepath}: {e}")
            raise

        return filepath


class LoggerConfig:
    """
    Logging setup for seeding runs

    Configures the ``seeder`` logger tree: a rich console handler on stderr
    (stdout stays free for CLI tables) and an optional rotating run log.
    Faker's locale chatter is capped at WARNING.
    """

    LOGGER_NAME = "seeder"
    FILE_FORMAT = '%(asctime)s %(levelname)-8s %(name)s: %(message)s'
    QUIET_LOGGERS = ('faker', 'faker.factory')

    @classmethod
    def setup_logger(
        cls,
        level: int = logging.INFO,
        log_file: Optional[Union[str, Path]] = None,
        log_to_console: bool = True
    ) -> logging.Logger:
        """
        Attach handlers to the ``seeder`` logger

        Args:
            level: Level for the seeder logger and its handlers
            log_file: Run log path, rotated at 5 MB
            log_to_console: Whether to log to stderr

        Returns:
            The ``seeder`` logger
        """
        seeder_logger = logging.getLogger(cls.LOGGER_NAME)
        seeder_logger.setLevel(level)
        seeder_logger.handlers.clear()

        if log_to_console:
            console_handler = RichHandler(
                console=Console(stderr=True),
                level=level,
                show_path=False,
                rich_tracebacks=True,
            )
            seeder_logger.addHandler(console_handler)

        if log_file:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=3)
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(cls.FILE_FORMAT))
            seeder_logger.addHandler(file_handler)

        for name in cls.QUIET_LOGGERS:
            logging.getLogger(name).setLevel(max(level, logging.WARNING))

        return seeder_logger


class SeedManager:
    """
    Manages random seeds for reproducibility

    Hands out the numpy generator and Faker instance used by the engine and
    seeds the global Python and numpy state as well.
    """

    def __init__(self, seed: Optional[int] = None, locale: str = "en_US"):
        """
        Initialize seed manager

        Args:
            seed: Random seed (None for random)
            locale: Faker locale
        """
        self.seed = seed
        self.locale = locale

    def set_seed(self):
        """Seed the global Python and numpy random state"""
        if self.seed is not None:
            random.seed(self.seed)
            np.random.seed(self.seed)
            logger.info(f"Random seed set to: {self.seed}")
        else:
            logger.info("No seed set - using random initialization")

    def create_rng(self) -> np.random.Generator:
        """Create the generator used for sampling and count draws"""
        return np.random.default_rng(self.seed)

    def create_faker(self) -> Faker:
        """Create a Faker instance, seeded when a seed is configured"""
        faker = Faker(self.locale)
        if self.seed is not None:
            faker.seed_instance(self.seed)
        return faker


def _merge_lists(base: List[Any], other: List[Any]) -> List[Any]:
    merged = deepcopy(base)
    for item in other:
        if item not in merged:
            merged.append(deepcopy(item))
    return merged


def deep_merge(base: Optional[Dict[str, Any]], other: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Structurally merge two mappings into a new one

    Nested mappings merge recursively, lists merge as an order-preserving
    union, anything else is replaced by the value from ``other``. Neither
    input is modified.

    Args:
        base: Mapping merged into (may be None)
        other: Mapping taking precedence (may be None)

    Returns:
        New merged mapping
    """
    result = deepcopy(base) if base else {}
    for key, value in (other or {}).items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            result[key] = _merge_lists(current, value)
        else:
            result[key] = deepcopy(value)
    return result


# Convenience functions
def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None
):
    """
    Quick logging setup

    Args:
        level: Logging level
        log_file: Optional log file path
    """
    LoggerConfig.setup_logger(level=level, log_file=log_file)


