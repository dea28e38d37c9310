"""
Configuration Management Module

Handles loading and validation of seed configuration files: the backend
connection, iteration counts, seed, and the entity schema.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional, Union, Tuple
from dataclasses import dataclass, field, asdict
from copy import deepcopy
import logging

from .exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class ConnectionConfig:
    """Backend selection and client specific connection settings"""
    client: str = "memory"
    connection: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SeederConfig:
    """Main seeding configuration"""
    schema: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    seed: Optional[int] = None
    iterations: int = 1
    continuous_iterations: Optional[int] = None  # None disables the continuous phase
    continuous_delay: float = 1.0  # seconds between continuous passes
    batch_size: int = 500
    drop_existing: bool = False
    locale: str = "en_US"

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return asdict(self)


class ConfigLoader:
    """Loads seed configurations from YAML files or dictionaries"""

    # original camelCase keys -> dataclass attribute
    KEY_ALIASES = {
        'connectionConfig': 'connection',
        'continuousIterations': 'continuous_iterations',
        'continuousDelay': 'continuous_delay',
        'batchSize': 'batch_size',
        'dropExisting': 'drop_existing',
    }

    def load_from_file(self, filepath: Union[str, Path]) -> SeederConfig:
        """
        Load configuration from a YAML file

        Args:
            filepath: Path to the YAML configuration file

        Returns:
            SeederConfig object
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise ConfigError(f"Configuration file not found: {filepath}")

        with open(filepath, 'r') as f:
            try:
                config_dict = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {filepath}: {e}") from e

        if not isinstance(config_dict, dict):
            raise ConfigError(f"Configuration file must contain a mapping: {filepath}")

        logger.info(f"Loaded configuration: {filepath}")
        return self.load_from_dict(config_dict)

    def load_from_dict(self, config_dict: Dict[str, Any]) -> SeederConfig:
        """
        Load configuration from a dictionary

        Args:
            config_dict: Configuration dictionary (camelCase or snake_case keys)

        Returns:
            SeederConfig object
        """
        values = {self.KEY_ALIASES.get(k, k): deepcopy(v) for k, v in config_dict.items()}

        unknown = set(values) - set(SeederConfig.__dataclass_fields__)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        connection = values.pop('connection', None) or {}
        if not isinstance(connection, dict):
            raise ConfigError("connection must be a mapping")

        config = SeederConfig(**values)
        config.connection = ConnectionConfig(
            client=connection.get('client', 'memory'),
            connection=connection.get('connection') or {},
        )
        return config

    def save_config(self, config: SeederConfig, filepath: Union[str, Path]):
        """
        Save configuration to a YAML file

        Args:
            config: Configuration to save
            filepath: Path to save the file
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, 'w') as f:
            yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)

        logger.info(f"Configuration saved to: {filepath}")


class ConfigValidator:
    """Validates configuration parameters"""

    @staticmethod
    def validate(config: SeederConfig, check_client: bool = True) -> Tuple[bool, List[str]]:
        """
        Validate configuration parameters

        Args:
            config: Configuration to validate
            check_client: Also require a known backend client

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        from .backends.types import TYPE_MAPPERS

        errors = []

        if not config.schema:
            errors.append("schema must declare at least one entity")
        elif not isinstance(config.schema, dict):
            errors.append("schema must be a mapping of entity name -> definition")

        if config.iterations < 0:
            errors.append("iterations must be non-negative")

        if config.continuous_iterations is not None and config.continuous_iterations < 0:
            errors.append("continuous_iterations must be non-negative")

        if config.continuous_delay < 0:
            errors.append("continuous_delay must be non-negative")

        if config.batch_size <= 0:
            errors.append("batch_size must be positive")

        if check_client and config.connection.client not in TYPE_MAPPERS:
            errors.append(f"connection.client must be one of {sorted(TYPE_MAPPERS)}")

        return len(errors) == 0, errors


def get_default_config() -> SeederConfig:
    """Get the default configuration"""
    return SeederConfig()
