"""
Root conftest.py - sys.path, env vars, shared fixtures.

Sets up the test environment so gridzonal imports from the checkout and
every test starts from a freshly read configuration.
"""

import os
import sys

import pytest

# Add project root to sys.path so 'gridzonal' and 'tests.factories' are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture(autouse=True, scope="session")
def set_minimal_env_vars():
    """
    Set minimal environment variables so configuration reads are predictable.
    """
    defaults = {
        "ENVIRONMENT": "dev",
        "DEBUG_MODE": "false",
        "LOG_LEVEL": "WARNING",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


@pytest.fixture(autouse=True)
def fresh_config():
    """Drop the config singleton before and after every test."""
    from gridzonal.config import reset_config
    reset_config()
    yield
    reset_config()


@pytest.fixture
def grid_2x2():
    """2x2 single-layer grid [[1, 2], [3, 4]] covering x in [0, 2], y in [0, 2]."""
    from tests.factories.model_factories import make_grid
    return make_grid([[1.0, 2.0], [3.0, 4.0]])
