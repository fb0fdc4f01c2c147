"""
Core Business Logic Package.

Contains business logic that operates on pure data models.
Separated from models to maintain clean architecture.

Exports:
    Membership: CellMembershipResolver
    Reducers: Reducer, UnweightedReducer, WeightedReducer, get_reducer,
              available_reducers, resolve_reducer
    Aggregation: ZonalAggregator
    Assembly: ResultAssembler
"""

# Membership
from .membership import CellMembershipResolver

# Reducers
from .reducers import (
    Reducer,
    UnweightedReducer,
    WeightedReducer,
    get_reducer,
    available_reducers,
    resolve_reducer
)

# Aggregation
from .aggregation import ZonalAggregator

# Assembly
from .assembler import ResultAssembler

__all__ = [
    # Membership
    'CellMembershipResolver',

    # Reducers
    'Reducer',
    'UnweightedReducer',
    'WeightedReducer',
    'get_reducer',
    'available_reducers',
    'resolve_reducer',

    # Aggregation
    'ZonalAggregator',

    # Assembly
    'ResultAssembler'
]
