# ============================================================================
# CONFIG PACKAGE INIT
# ============================================================================
# STATUS: Configuration package exports and singleton
# PURPOSE: Single entry point for reading configuration
# LAST_REVIEWED: 14 OCT 2026
# EXPORTS: AppConfig, ExtractionConfig, LoaderConfig, get_config, reset_config, debug_config
# DEPENDENCIES: pydantic
# ============================================================================

"""
gridzonal configuration, read once from the environment.

Layout:
    config/
    ├── __init__.py              # get_config / reset_config singleton
    ├── app_config.py            # AppConfig (process switches + sections)
    ├── extraction_config.py     # Membership policy, missing values, threads
    ├── loader_config.py         # NetCDF backend, metadata logging, CSV export
    └── defaults.py              # Default values

Usage:
    from gridzonal.config import get_config
    config = get_config()
    policy = config.extraction.membership_policy
"""

from typing import Optional

from .extraction_config import ExtractionConfig
from .loader_config import LoaderConfig
from .app_config import AppConfig


# ============================================================================
# PROCESS-WIDE INSTANCE
# ============================================================================

_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Process-wide AppConfig, built from the environment on first use."""
    global _config_instance
    if _config_instance is None:
        _config_instance = AppConfig.from_environment()
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None


def debug_config() -> dict:
    """Effective settings as nested plain dicts, for a startup log line."""
    config = get_config()
    return {
        'debug_mode': config.debug_mode,
        'environment': config.environment,
        'log_level': config.log_level,
        'extraction': config.extraction.debug_dict(),
        'loader': config.loader.debug_dict()
    }


__all__ = [
    'AppConfig',
    'ExtractionConfig',
    'LoaderConfig',
    'get_config',
    'reset_config',
    'debug_config',
]
