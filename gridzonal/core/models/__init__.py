"""
Core Data Models Package.

Contains pure data structures without business logic.
All business logic is in the core.logic package.

Exports:
    MembershipPolicy, BoundaryRule: Membership enums
    Bounds, GridWindow, Grid: Gridded field
    Region, RegionSet: Polygon regions with attributes
    NO_DATA, CellMembership, OutputRow, OutputTable: Result types
"""

# Enums
from .enums import (
    MembershipPolicy,
    BoundaryRule
)

# Grid
from .grid import (
    Bounds,
    GridWindow,
    Grid
)

# Regions
from .regions import (
    Region,
    RegionSet
)

# Results
from .results import (
    NO_DATA,
    AggregateValue,
    CellMembership,
    ZonalResult,
    OutputRow,
    OutputTable
)

__all__ = [
    # Enums
    'MembershipPolicy',
    'BoundaryRule',

    # Grid
    'Bounds',
    'GridWindow',
    'Grid',

    # Regions
    'Region',
    'RegionSet',

    # Results
    'NO_DATA',
    'AggregateValue',
    'CellMembership',
    'ZonalResult',
    'OutputRow',
    'OutputTable'
]
