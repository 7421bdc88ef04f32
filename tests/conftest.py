"""
Pytest configuration and shared fixtures for station tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

# Import fixture modules
_common = importlib.import_module("fixtures.common")
_car = importlib.import_module("fixtures.car_fixtures")

# Extract factory functions
make_assignment = _common.make_assignment
make_context = _common.make_context
make_round_body = _common.make_round_body

make_single_block_car = _car.make_single_block_car


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def assignment():
    """Provide a default Assignment for tests."""
    return make_assignment()


@pytest.fixture
def round_body():
    """Provide a default round payload."""
    return make_round_body()


@pytest.fixture
def ctx():
    """Station context that fails on any network access."""
    return make_context()


@pytest.fixture
def hello_car():
    """(cid, car bytes) of a single raw block holding b"hello world"."""
    return make_single_block_car()


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep SPARK_* variables of the developer's shell out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("SPARK_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
