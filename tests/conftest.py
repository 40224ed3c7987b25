"""
Shared pytest fixtures for the topic discovery test suite.

This module provides common fixtures used across test modules:
- Project paths
- Configuration cache reset

Usage:
    Fixtures are automatically discovered by pytest.
    Import them directly in test files - no explicit import needed.
"""

import sys
from pathlib import Path

import pytest

# Ensure src is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config._loader import clear_config_cache


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def fresh_config():
    """Clear cached YAML before and after a test that inspects configuration."""
    clear_config_cache()
    yield
    clear_config_cache()
