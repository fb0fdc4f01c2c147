"""
Core Extraction Components.

Structure:
    models/: Pure data structures (no business logic)
    logic/: Membership, reducers, aggregation and assembly
    engine.py: extract() orchestration

Exports:
    extract: Zonal aggregation of a Grid over a RegionSet
"""

# Make subpackages available first (no circular dependencies)
from . import models
from . import logic

# Lazy imports to avoid circular dependencies with gridzonal.config
# These are imported on first access via __getattr__
_LAZY_IMPORTS = {
    'extract': '.engine',
}


def __getattr__(name):
    """Lazy import core entry points to avoid circular dependencies."""
    if name in _LAZY_IMPORTS:
        from importlib import import_module
        module = import_module(_LAZY_IMPORTS[name], package='gridzonal.core')
        return getattr(module, name)
    raise AttributeError(f"module 'gridzonal.core' has no attribute '{name}'")


__all__ = [
    'extract',
    'models',
    'logic'
]
