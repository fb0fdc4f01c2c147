"""
Zonal Aggregator.

Applies a Reducer to the cell values of one region, once per grid layer.

Missing values:
    remove_missing=True   NaN cells (and their weights) are dropped first
    remove_missing=False  NaN cells reach the reducer; built-ins return NaN

A layer with no remaining cells yields NO_DATA, never 0 and never an
arithmetic error. A reducer returning None also yields NO_DATA.

Exports:
    ZonalAggregator
"""

from typing import Tuple

import numpy as np

from gridzonal.core.models.grid import Grid
from gridzonal.core.models.results import NO_DATA, AggregateValue, CellMembership
from gridzonal.exceptions import ContractViolationError
from .reducers import Reducer


class ZonalAggregator:
    """Per-layer reduction of a region's member cells."""

    def __init__(self, grid: Grid, reducer: Reducer, remove_missing: bool = True):
        if not isinstance(reducer, Reducer):
            raise ContractViolationError(
                f"reducer must be a Reducer, got {type(reducer).__name__}"
            )
        self.grid = grid
        self.reducer = reducer
        self.remove_missing = remove_missing

    def aggregate(self, membership: CellMembership) -> Tuple[AggregateValue, ...]:
        """One aggregate per grid layer, in layer order."""
        if membership.is_empty:
            return (NO_DATA,) * self.grid.n_layers

        stack = self.grid.layer_values(membership.rows, membership.cols)
        return tuple(
            self._reduce_layer(values, membership.weights)
            for values in stack
        )

    def _reduce_layer(self, values: np.ndarray, weights: np.ndarray) -> AggregateValue:
        if self.remove_missing:
            present = ~np.isnan(values)
            values = values[present]
            weights = weights[present]

        if values.size == 0:
            return NO_DATA

        result = self.reducer.reduce(values, weights if self.reducer.weighted else None)
        if result is None:
            return NO_DATA
        return float(result)
