"""
Test Suite for Utilities

Tests logging setup, seeding helpers, file output and deep merge.
"""

import json
import logging

import pytest
from rich.logging import RichHandler

from seeder.utils import LoggerConfig, SeedManager, FileHandler, deep_merge


@pytest.fixture
def seeder_logger():
    logger = logging.getLogger(LoggerConfig.LOGGER_NAME)
    saved = (list(logger.handlers), logger.level)
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])


class TestLoggerConfig:
    """Test logging setup"""

    def test_console_handler(self, seeder_logger):
        logger = LoggerConfig.setup_logger(level=logging.DEBUG)

        assert logger is seeder_logger
        assert logger.level == logging.DEBUG
        assert [type(h) for h in logger.handlers] == [RichHandler]

    def test_run_log_file(self, seeder_logger, tmp_path):
        log_file = tmp_path / 'logs' / 'run.log'
        LoggerConfig.setup_logger(log_file=log_file, log_to_console=False)

        logging.getLogger('seeder.seeder').info('Dependency queue: [[User]]')
        for handler in seeder_logger.handlers:
            handler.flush()

        assert 'INFO' in log_file.read_text()
        assert 'seeder.seeder: Dependency queue: [[User]]' in log_file.read_text()

    def test_faker_capped_at_warning(self, seeder_logger):
        LoggerConfig.setup_logger(level=logging.DEBUG, log_to_console=False)
        assert logging.getLogger('faker').level == logging.WARNING

    def test_repeated_setup_replaces_handlers(self, seeder_logger):
        LoggerConfig.setup_logger()
        LoggerConfig.setup_logger()
        assert len(seeder_logger.handlers) == 1


class TestSeedManager:
    """Test reproducible random sources"""

    def test_same_seed_same_values(self):
        first, second = SeedManager(11), SeedManager(11)

        assert first.create_rng().integers(0, 1000, 5).tolist() == second.create_rng().integers(0, 1000, 5).tolist()
        assert first.create_faker().name() == second.create_faker().name()


def test_write_records_json(tmp_path):
    path = FileHandler.write_records([{'id': 1}, {'id': 2}], tmp_path / 'out' / 'User.json')
    assert json.loads(path.read_text()) == [{'id': 1}, {'id': 2}]


def test_write_records_unsupported(tmp_path):
    with pytest.raises(ValueError):
        FileHandler.write_records([{'id': 1}], tmp_path / 'User.xml')


def test_deep_merge():
    base = {'fields': {'a': {'type': 'word'}}, 'unique': ['a']}
    other = {'fields': {'b': {'type': 'word'}}, 'unique': ['a', 'b']}

    merged = deep_merge(base, other)

    assert merged == {'fields': {'a': {'type': 'word'}, 'b': {'type': 'word'}}, 'unique': ['a', 'b']}
    assert base == {'fields': {'a': {'type': 'word'}}, 'unique': ['a']}
