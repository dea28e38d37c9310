"""
Test Suite for Relational Seeder

Provides tests for:
- Schema normalization and parsing
- Dependency resolution
- Record stores and filters
- Record generation
- Backends and type mapping
- Configuration management
- Orchestration
"""

__version__ = "1.0.0"
