"""
Config test fixtures - clean environment via monkeypatch.
"""

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = [
        "GRIDZONAL_DEFAULT_AGGREGATION", "GRIDZONAL_REMOVE_MISSING",
        "GRIDZONAL_MEMBERSHIP_POLICY", "GRIDZONAL_BOUNDARY_RULE", "GRIDZONAL_SMALL_POLYGON_FALLBACK",
        "GRIDZONAL_MAX_WORKERS", "GRIDZONAL_PARALLEL_MIN_REGIONS",
        "GRIDZONAL_WEIGHT_EPSILON", "GRIDZONAL_NETCDF_ENGINE",
        "GRIDZONAL_LOG_SOURCE_METADATA", "GRIDZONAL_EXPORT_NA_REP",
        "DEBUG_MODE", "LOG_LEVEL", "ENVIRONMENT",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
