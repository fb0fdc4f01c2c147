"""
gridzonal - zonal aggregate statistics of gridded fields over polygon regions.

Usage:
    from gridzonal import extract_gridded
    table = extract_gridded("districts.shp", "rain.nc", "rf", "ST_NM", "DISTRICT")
    table.to_dataframe()

Exports:
    Grid, Region, RegionSet, OutputTable, NO_DATA: Core models
    MembershipPolicy, BoundaryRule: Membership options
    UnweightedReducer, WeightedReducer: Custom aggregation strategies
    extract: In-memory extraction
    extract_gridded: File-to-table pipeline
"""

__version__ = "0.3.0"

# Config first: core.engine reads it at import time
from .config import get_config
from .core.models import (
    NO_DATA,
    BoundaryRule,
    Grid,
    MembershipPolicy,
    OutputTable,
    Region,
    RegionSet,
)
from .core.logic import UnweightedReducer, WeightedReducer
from .core.engine import extract
from .services.zonal_extraction import extract_gridded

__all__ = [
    'Grid',
    'Region',
    'RegionSet',
    'OutputTable',
    'NO_DATA',
    'MembershipPolicy',
    'BoundaryRule',
    'UnweightedReducer',
    'WeightedReducer',
    'extract',
    'extract_gridded',
    'get_config',
]
